# (c) Copyright Datacraft, 2026
"""Tests for the dependency-injection container."""
import threading

import pytest

from samehouse import BindingResolutionError, Container, get_container, set_container


class Service:
    pass


def test_bind_builds_new_instance_each_time():
    container = Container()
    container.bind(Service, lambda c: Service())

    assert container.make(Service) is not container.make(Service)


def test_singleton_returns_same_instance():
    container = Container()
    calls = []

    def factory(c):
        calls.append(c)
        return Service()

    container.singleton(Service, factory)

    first = container.make(Service)
    second = container.make(Service)

    assert first is second
    assert calls == [container]


def test_singleton_without_factory_calls_class():
    container = Container()
    container.singleton(Service)

    assert isinstance(container.make(Service), Service)


def test_singleton_without_factory_requires_callable():
    with pytest.raises(TypeError):
        Container().singleton("not-callable")


def test_instance_is_returned_as_is():
    container = Container()
    service = Service()
    container.instance("service", service)

    assert container.make("service") is service
    assert "service" in container


def test_unbound_key_raises():
    container = Container()

    with pytest.raises(BindingResolutionError) as exc:
        container.make(Service)

    assert "Service" in str(exc.value)
    assert exc.value.key is Service


def test_forget_and_flush():
    container = Container()
    container.singleton(Service)
    container.instance("other", object())

    container.forget(Service)
    assert not container.bound(Service)
    assert container.bound("other")

    container.flush()
    assert not container.bound("other")


def test_rebinding_drops_cached_instance():
    container = Container()
    container.singleton(Service)
    first = container.make(Service)

    container.singleton(Service)

    assert container.make(Service) is not first


def test_concurrent_resolution_builds_one_instance():
    container = Container()
    container.singleton(Service)
    results = []
    barrier = threading.Barrier(8)

    def resolve():
        barrier.wait()
        results.append(container.make(Service))

    threads = [threading.Thread(target=resolve) for _ in range(8)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert len({id(r) for r in results}) == 1


def test_default_container_is_created_once():
    set_container(None)
    try:
        assert get_container() is get_container()
    finally:
        set_container(None)
