import threading
from concurrent.futures import ThreadPoolExecutor

import pytest
import stubs

from tinyioc import (
    Container,
    DuplicateBindingError,
    ResolutionError,
    UnboundNameError,
    UnresolvableBindingError,
)


def test_make_bound_instance_returns_same_object():
    c = Container()
    engine = stubs.Engine()

    c.bind("svc", engine)

    assert c.make("svc") is engine
    assert c.make("svc") is engine


def test_bind_twice_raises_and_keeps_first_binding():
    c = Container()
    first = stubs.Engine()

    c.bind("foo", first)
    with pytest.raises(DuplicateBindingError) as ctx:
        c.bind("foo", stubs.Engine())

    assert ctx.value.name == "foo"
    assert "foo is already registered." in str(ctx.value)
    assert c.make("foo") is first


def test_bind_instance_twice_raises():
    c = Container()
    c.bind_instance("greeting", "hello")

    with pytest.raises(DuplicateBindingError):
        c.bind("greeting", "world")


def test_bind_rejects_empty_name():
    c = Container()
    with pytest.raises(ValueError):
        c.bind("", stubs.Engine())


def test_bind_rejects_non_string_non_class_token():
    c = Container()
    with pytest.raises(TypeError):
        c.bind(42, stubs.Engine())


def test_factory_receives_container_and_runs_on_every_make():
    c = Container()
    calls = []

    def make_engine(container):
        calls.append(container)
        return stubs.Engine()

    c.bind("engine", make_engine)
    e1 = c.make("engine")
    e2 = c.make("engine")

    assert calls == [c, c]
    assert isinstance(e1, stubs.Engine)
    assert e1 is not e2


def test_make_unbound_type_returns_distinct_instances():
    c = Container()

    a = c.make(stubs.Engine)
    b = c.make(stubs.Engine)

    assert isinstance(a, stubs.Engine)
    assert a is not b


def test_make_builds_nested_dependency():
    c = Container()

    car = c.make(stubs.Car)

    assert isinstance(car, stubs.Car)
    assert type(car.engine) is stubs.Engine


def test_make_by_import_path():
    c = Container()

    car = c.make("stubs.Car")

    assert isinstance(car, stubs.Car)
    assert isinstance(car.engine, stubs.Engine)


def test_make_bound_type_reference_by_class_and_by_path():
    c = Container()
    c.bind("car", stubs.Car)
    c.bind("other-car", "stubs:Car")

    assert isinstance(c.make("car"), stubs.Car)
    assert isinstance(c.make("other-car"), stubs.Car)
    assert c.make("car") is not c.make("car")


def test_make_bound_type_forwards_supplied_args():
    c = Container()
    c.bind("greeter", stubs.Greeter)

    greeter = c.make("greeter", "hi")

    assert greeter.greeting == "hi"
    assert isinstance(greeter.engine, stubs.Engine)


def test_bind_instance_allows_strings_and_callables_as_values():
    c = Container()

    def handler():
        return "handled"

    c.bind_instance("greeting", "hello")
    c.bind_instance("handler", handler)

    assert c.make("greeting") == "hello"
    assert c.make("handler") is handler


def test_make_binding_to_unknown_type_raises_wrapped_error():
    c = Container()
    c.bind("missing", "NoSuchType")

    with pytest.raises(ResolutionError) as ctx:
        c.make("missing")

    assert isinstance(ctx.value.cause, UnresolvableBindingError)
    assert ctx.value.__cause__ is ctx.value.cause
    assert ctx.value.code == "unresolvable_binding"
    assert "'NoSuchType'" in str(ctx.value)
    assert str(ctx.value).startswith("Unable to resolve missing: ")


def test_make_binding_to_abstract_type_raises_wrapped_error():
    c = Container()
    c.bind("repo", stubs.Repository)

    with pytest.raises(ResolutionError) as ctx:
        c.make("repo")

    assert isinstance(ctx.value.cause, UnresolvableBindingError)


def test_make_unknown_name_raises_unbound():
    c = Container()

    with pytest.raises(UnboundNameError) as ctx:
        c.make("nothing.here")

    assert ctx.value.name == "nothing.here"
    assert "nothing.here is not bound" in str(ctx.value)


def test_make_abstract_class_raises_unbound():
    c = Container()

    with pytest.raises(UnboundNameError):
        c.make(stubs.Repository)


def test_make_string_value_binding_raises_wrapped_error():
    # strings passed to `bind` are type references, not values
    c = Container()
    c.bind("greeting", "hello")

    with pytest.raises(ResolutionError):
        c.make("greeting")


def test_container_resolves_itself():
    c = Container()

    assert c.make(Container) is c
    assert c.make(Container) is c
    assert c.make("tinyioc.Container") is c


def test_container_is_injected_into_dependents():
    c = Container()

    obj = c.make(stubs.NeedsContainer)

    assert obj.container is c


def test_subclassed_container_resolves_itself_for_base_type():
    class AppContainer(Container): ...

    c = AppContainer()

    assert c.make(Container) is c
    assert c.make(AppContainer) is c


def test_binding_to_container_type_returns_container():
    c = Container()
    c.bind("ioc", Container)

    assert c.make("ioc") is c


def test_has_reports_resolvable_tokens():
    c = Container()
    c.bind("svc", stubs.Engine())

    assert c.has("svc")
    assert c.has(stubs.Engine)
    assert c.has("stubs.Car")
    assert c.has(Container)
    assert not c.has(stubs.Repository)
    assert not c.has("nope")


def test_make_from_several_threads():
    c = Container()
    barrier = threading.Barrier(4)

    def build(_):
        barrier.wait()
        return c.make(stubs.Car)

    with ThreadPoolExecutor(max_workers=4) as pool:
        cars = list(pool.map(build, range(4)))

    assert len({id(car) for car in cars}) == 4
    assert all(isinstance(car.engine, stubs.Engine) for car in cars)


def test_make_value_bound_under_module_name_does_not_import_module():
    c = Container()
    c.bind("import_side_effect", 1)

    assert c.make("import_side_effect") == 1
    assert c.has("import_side_effect")


def test_container_resolves_itself_by_any_import_path():
    c = Container()

    assert c.make("tinyioc:Container") is c
    assert c.make("tinyioc._container.Container") is c
