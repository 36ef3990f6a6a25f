# paymentgw

Building blocks for event-driven services in Python: domain events and
aggregates, event-sourced aggregates with pluggable stores, a type registry
that serializes payloads as JSON or protocol buffers, and asynchronous
publishing and handling of events and replies as messages.

It is a library; it has no command-line entry point.

## Type registry (`paymentgw.registry`)

`paymentgw.registry.registry.Registry` maps a key to a factory, a serializer
and a deserializer.

- `Registry.build(key, *options)` calls the factory, then runs the options
  given at registration followed by those passed in. An option is a callable
  that receives the new value and may raise.
- `Registry.serialize(key, value)` and
  `Registry.deserialize(key, data, *options)` encode and decode with the
  registered serde.
- An unknown key raises `UnregisteredKey` (a `LookupError`); registering a key
  twice raises `AlreadyRegisteredKey` (a `ValueError`).
- `validate_implements(cls)` is a build option that raises `TypeError` unless
  the built value is an instance of `cls`.
- `register`, `register_key` and `register_factory` register a class (keyed by
  its `key()` method), a class under an explicit key, or a factory that must
  not return `None`.

Two `Serde` implementations wire formats into a registry:

- `paymentgw.registry.json_serde.JsonSerde` writes compact JSON (dataclasses
  and plain objects become objects, bytes become base64). On the way back it
  fills dicts, lists, dataclasses and plain objects in place.
- `paymentgw.registry.proto_serde.ProtoSerde` accepts only protobuf message
  classes and factories that build them, and uses the protobuf wire format.

```python
from dataclasses import dataclass

from paymentgw.registry.json_serde import JsonSerde
from paymentgw.registry.registry import Registry


@dataclass
class PaymentCreated:
    payment_id: str = ""
    amount: int = 0


reg = Registry()
JsonSerde(reg).register_key("payments.PaymentCreated", PaymentCreated)

data = reg.serialize("payments.PaymentCreated", PaymentCreated("p-1", 100))
assert reg.deserialize("payments.PaymentCreated", data) == PaymentCreated("p-1", 100)
```

## Domain modelling (`paymentgw.ddd`)

- `entity.Entity` has an `id` and a `name`; `Entity.equals` compares ids.
  `set_id` and `set_name` are registry build options.
- `message_types.Metadata` is a `dict` with a `set` method.
  `Event`, `Command` and `Reply` carry a name, a payload, `Metadata` and an
  `occurred_at` time; `new_event`, `new_command` and `new_reply` give them a
  fresh UUID and merge each mapping passed as an option into the metadata.
- `aggregate.Aggregate` collects the events raised with `add_event`, stamping
  each with the aggregate's name and id; `clear_events` drops them.
  `AggregateEvent` exposes `aggregate_name`, `aggregate_id` and
  `aggregate_version` from its metadata. `set_events` is a build option.
- `dispatcher.EventDispatcher` hands published events to subscribed async
  handlers. `subscribe(handler, *names)` limits a handler to the named events;
  with no names it receives all of them. `publish` stops at the first handler
  that raises.

## Event sourcing (`paymentgw.es`)

- `sourced_aggregate.Aggregate` adds a `version` and a `pending_version`; each
  event from `add_event` records the version it brings the aggregate to, and
  `commit_events` moves `version` forward and clears the events. Subclasses
  supply `apply_event` (and `apply_snapshot` / `to_snapshot` for snapshots).
  `set_version`, `load_event` and `load_snapshot` restore stored state.
- `aggregate_store.AggregateStore` is the abstract async store;
  `aggregate_store_with_middleware(store, A, B, C)` gives `A(B(C(store)))`.
  `new_event_publisher(publisher)` is a middleware whose `EventPublisher`
  publishes an aggregate's events after the wrapped store saves them.
- `aggregate_repository.AggregateRepository` builds aggregates through the
  registry and loads them from a store; `save` does nothing when there are no
  pending events, otherwise applies them, saves and commits.
  `FakeAggregateRepository` keeps saved aggregates in memory for tests and
  has `reset(*aggregates)`.

```python
from dataclasses import dataclass

from paymentgw.es.sourced_aggregate import Aggregate


@dataclass(eq=False)
class Payment(Aggregate):
    status: str = ""

    def apply_event(self, event):
        self.status = event.name


payment = Payment(id="p-1", name="payments.Payment")
payment.add_event("payments.PaymentCreated", {"amount": 100})
assert payment.pending_version == 1
assert payment.events[0].aggregate_version == 1

payment.commit_events()
assert payment.version == 1 and payment.events == []
```

## Asynchronous messaging (`paymentgw.am`)

- `message.Message` is a named payload addressed to a subject.
  `PublisherFunc` turns an async function into a publisher;
  `MessagePublisher` and `MessageSubscriber` wrap a publisher or every
  subscribed handler in middleware. `message_stream_with_middleware`,
  `message_publisher_with_middleware` and `message_handler_with_middleware`
  apply middleware with the first one outermost.
- `subscriber_config.new_subscriber_config(options)` starts from the defaults
  (manual acknowledgement, a 30 second ack wait, 5 redeliveries, no filter,
  no group) and applies `MessageFilter`, `GroupName`, `AckType`, `AckWait`
  and `MaxRedeliver` options in order.
- `events.EventPublisher` serializes an event's payload through the registry
  and publishes it in a protobuf envelope with its `occurred_at` time;
  `new_event_handler` decodes such messages into `EventMessage` objects, whose
  `ack`, `nack`, `extend` and `kill` act on the incoming message.
  `FakeEventPublisher` records publications; `last()` returns the latest
  subject and event, or raises `LookupError` when there is none.
- `replies.ReplyPublisher` and `new_reply_handler` do the same for replies,
  except that the bare `SUCCESS_REPLY` and `FAILURE_REPLY` carry no payload.
  The module also defines the reply outcome and header names.

## Configuration (`paymentgw.config`)

`init_config(environ=None)` reads an `AppConfig` from the given mapping or the
process environment. Values missing there are filled from the `.env` files in
the working directory for the `ENVIRONMENT` in effect: `.env.<env>.local`,
`.env.local` (skipped for `test`), `.env.<env>` and `.env`, or `.env.local`
and `.env` when no environment is set.

| Setting | Variable | Default |
| --- | --- | --- |
| `environment` | `ENVIRONMENT` | empty |
| `log_level` | `LOG_LEVEL` | `DEBUG` |
| `pg.conn` | `PG_CONN` | required |
| `nats.url` | `NATS_URL` | required |
| `nats.stream` | `NATS_STREAM` | `mallbots` |
| `rpc.host`, `rpc.port` | `RPC_HOST`, `RPC_PORT` | `0.0.0.0`, `9000` |
| `rpc.services` | `RPC_SERVICES` | empty |
| `web.host`, `web.port` | `WEB_HOST`, `WEB_PORT` | `0.0.0.0`, `:8080` |
| `otel.service_name` | `OTEL_SERVICE_NAME` | `mallbots` |
| `otel.exporter_endpoint` | `OTEL_EXPORTER_OTLP_ENDPOINT` | `http://collector:4317` |
| `shutdown_timeout` | `SHUTDOWN_TIMEOUT` | `30s` |

A missing required value raises `ValueError`, as does a malformed duration
(durations are written like `30s`, `1m30s` or `500ms`). `parse_services`
turns `"stores=stores:9000,payments=payments:9000"` into
`{"STORES": "stores:9000", "PAYMENTS": "payments:9000"}`;
`RpcConfig.service(name)` returns a service's address, falling back to the
server's own `address`. `WebConfig.address` joins host and port.

## What the package does not do

- It does not talk to a database or a message broker. Aggregate stores,
  publishers and subscribers are interfaces you implement; the package ships
  only in-memory fakes for tests.
- It has no command messaging, no transactional inbox or outbox, no saga
  orchestration, no dependency-injection container, no process lifecycle
  management and no logging setup. The `paymentgw.sec`, `paymentgw.tm`,
  `paymentgw.postgres` and `paymentgw.di` packages are empty.
- It starts no servers and has no command-line interface.

## Running the tests

The test suite uses pytest and pytest-asyncio, available through the
`test` extra:

```
pip install .[test]
pytest
```