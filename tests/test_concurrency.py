import threading
import time
from concurrent.futures import ThreadPoolExecutor

from ioclite import Container, Lifetime


WORKERS = 16


def _resolve_concurrently(c: Container, token: object) -> list:
    barrier = threading.Barrier(WORKERS)

    def worker():
        barrier.wait()
        return c.resolve(token)

    with ThreadPoolExecutor(max_workers=WORKERS) as pool:
        futures = [pool.submit(worker) for _ in range(WORKERS)]
        return [f.result() for f in futures]


def test_concurrent_singleton_factory_is_invoked_once():
    c = Container()
    calls = []

    class Service: ...

    def slow_factory():
        calls.append(threading.get_ident())
        time.sleep(0.01)
        return Service()

    c.register_factory(Service, slow_factory, lifetime=Lifetime.SINGLETON)

    results = _resolve_concurrently(c, Service)

    assert len(calls) == 1
    assert all(r is results[0] for r in results)


def test_concurrent_singleton_type_is_constructed_once():
    c = Container()
    built = []

    class Dependency: ...

    class Service:
        def __init__(self, dep: Dependency):
            built.append(self)
            time.sleep(0.01)
            self.dep = dep

    c.register_type(Dependency, Dependency)
    c.register_type(Service, Service, lifetime=Lifetime.SINGLETON)

    results = _resolve_concurrently(c, Service)

    assert len(built) == 1
    assert all(r is results[0] for r in results)


def test_concurrent_transient_resolutions_are_distinct():
    c = Container()

    class Service: ...

    c.register_type(Service, Service, lifetime=Lifetime.TRANSIENT)

    results = _resolve_concurrently(c, Service)

    assert len({id(r) for r in results}) == WORKERS
