# lunartrack

A small HTTP service that keeps the current state of rockets by processing
state-change messages. Messages may arrive out of order or more than once:
messages ahead of the next expected number are buffered, duplicates are
accepted and ignored, and each rocket's messages are applied strictly in
message-number order.

It needs nothing beyond the Python standard library (Python 3.11 or later).

## Installing

```
pip install .
```

## Running

```
lunartrack
lunartrack --host 127.0.0.1 --port 9000
```

By default the server binds all interfaces on port 8088. `--host` and
`--port` change the address. It runs until interrupted with Ctrl-C.

## Endpoints

| Method | Path                    | Purpose                                        |
|--------|-------------------------|------------------------------------------------|
| POST   | `/messages`             | Submit a rocket message                        |
| GET    | `/rockets`              | List rockets (`sortBy`, `sortOrder` optional)  |
| GET    | `/rockets/{id}`         | Full state of one rocket                       |
| GET    | `/debug/rockets`        | Last processed message number of every rocket  |
| GET    | `/debug/rockets/{id}`   | Processed and pending message details          |

`sortBy` accepts `id`, `type`, `speed`, `mission`, `exploded` or `updatedAt`
(default `id`). `sortOrder` accepts `asc` or `desc` (default `asc`). Any other
value is answered with 400. Text fields sort case-insensitively. With
`exploded`, rockets that are still flying come first, and ties are broken by id.

A rocket id in the path must be at least 3 bytes long. A shorter id gets 400,
and an unknown id gets 404. An unknown path gets a plain-text 404. A known
path with the wrong method gets 405 with an `Allow` header.

### Message format

```json
{
  "metadata": {
    "channel": "193270a9-c9cf-404a-8f83-838e71d9ae67",
    "messageNumber": 1,
    "messageTime": "2024-03-14T19:39:05.86337+01:00",
    "messageType": "RocketLaunched"
  },
  "message": {
    "type": "Falcon-9",
    "launchSpeed": 500,
    "mission": "ARTEMIS"
  }
}
```

`channel` identifies the rocket. `messageNumber` must be positive.
`messageTime` is an RFC 3339 timestamp and is required.

Supported message types and their content fields:

- `RocketLaunched`: `type`, `mission`, `launchSpeed` (not negative). A launch
  also relaunches an exploded rocket.
- `RocketSpeedIncreased` / `RocketSpeedDecreased`: `by` (positive). Speed
  never drops below 0.
- `RocketExploded`: `reason`. Buffered messages for the rocket are dropped,
  except launches. Later non-launch messages are refused.
- `RocketMissionChanged`: `newMission`

Messages that arrive for a rocket before its launch are buffered until the
launch arrives.

Errors come back as `{"error": {"code": ..., "message": ..., "details": ...}}`
with a matching HTTP status:

- A body that is not JSON gets 400.
- A validation failure gets 400 and also carries `field`.
- A message that cannot be applied gets 400 and also carries `rocketId`,
  `messageNumber` and `messageType`. Examples are a number already passed, or
  a change to an exploded rocket.

## Using it from Python

```python
from lunartrack.api import ApiHandler
from lunartrack.repository import RocketRepository
from lunartrack.server import create_app
from lunartrack.web import Request

app = create_app(ApiHandler(RocketRepository()))
response = app(Request(method="GET", path="/rockets", query_string="sortBy=speed&sortOrder=desc"))
print(response.status, response.json())
```

`create_app` returns a callable that takes a `lunartrack.web.Request` and
returns a `lunartrack.web.Response`. `lunartrack.server.Router` and
`build_router` are available if you want to compose routes yourself.

`RocketRepository` can also be used on its own:

- `process_message` applies a `lunartrack.models.RocketMessage` and returns
  `False` if it could not be applied.
- `get_rocket` reads back one rocket and returns `None` if it is unknown.
- `get_all_rockets` returns summaries of every rocket.
- `get_debug_info` returns the processed count and the buffered message
  numbers.

`RocketMessage.from_dict` builds a message from decoded JSON.
`lunartrack.validation.validate_rocket_message` raises
`lunartrack.errors.ValidationError` for an incomplete message.
`lunartrack.sorting.sort_rockets` orders rocket summaries.

## What it does not do

- State is kept in memory only. Every rocket is lost when the process stops.
- There is no interactive API documentation page. The endpoints above are
  the whole interface.

## Tests

```
pip install .[test]
pytest
```