from abc import ABC, abstractmethod

import foobarbaz
import pytest

from ioclite import Container, NotRegisteredError, candidates_from_module


def test_register_conventions_binds_i_prefixed_bases():
    c = Container()

    registered = c.register_conventions([foobarbaz.Foo, foobarbaz.Bar, foobarbaz.Baz])

    assert registered == [
        (foobarbaz.IFoo, foobarbaz.Foo),
        (foobarbaz.IBar, foobarbaz.Bar),
        (foobarbaz.IBaz, foobarbaz.Baz),
    ]
    assert foobarbaz.IFoo in c
    assert isinstance(c.resolve(foobarbaz.IBaz), foobarbaz.Baz)
    assert c.resolve(foobarbaz.IBaz) is not c.resolve(foobarbaz.IBaz)


def test_register_conventions_skips_unmatched_candidates_silently():
    c = Container()

    class Lonely: ...

    registered = c.register_conventions([Lonely, foobarbaz.Standalone, 42, "Foo", int])

    assert registered == []
    with pytest.raises(NotRegisteredError):
        c.resolve(Lonely)


def test_register_conventions_skips_abstract_candidates():
    c = Container()

    class IService(ABC):
        @abstractmethod
        def run(self) -> None: ...

    class Service(IService):
        @abstractmethod
        def stop(self) -> None: ...

    assert c.register_conventions([Service]) == []


def test_register_conventions_matches_indirect_bases():
    c = Container()

    class IRepo: ...

    class Mixin: ...

    class BaseRepo(Mixin, IRepo): ...

    class Repo(BaseRepo): ...

    assert c.register_conventions([Repo]) == [(IRepo, Repo)]
    assert isinstance(c.resolve(IRepo), Repo)


def test_register_conventions_requires_exact_name_match():
    c = Container()

    class IFooService: ...

    class Foo(IFooService): ...

    assert c.register_conventions([Foo]) == []


def test_register_conventions_overwrites_existing_binding():
    c = Container()
    c.register_instance(foobarbaz.IBaz, foobarbaz.Baz())

    c.register_conventions([foobarbaz.Baz])

    assert c.resolve(foobarbaz.IBaz) is not c.resolve(foobarbaz.IBaz)


def test_candidates_from_module_lists_classes_in_definition_order():
    names = [cls.__name__ for cls in candidates_from_module(foobarbaz)]
    assert names == ["IBaz", "Baz", "IBar", "Bar", "IFoo", "Foo", "Standalone"]


def test_register_conventions_from_module_wires_whole_graph():
    c = Container()

    c.register_conventions(candidates_from_module(foobarbaz))

    foo = c.resolve(foobarbaz.IFoo)
    assert isinstance(foo, foobarbaz.Foo)
    assert isinstance(foo.bar, foobarbaz.Bar)
    assert isinstance(foo.bar.baz, foobarbaz.Baz)
    assert foo.bar.baz.extra_parameter_was_supplied is False
