"""
arraysync Model - Minimal Host Object System
============================================

The array observers and derived views in arraysync need a small amount of
machinery from the object they are declared on:

- keyed ``get``/``set`` access to values,
- reference-level observers that fire when a key is assigned a new object,
- hooks that run once for every new instance,
- computed properties, both shared by a class and installed on one instance.

Model provides exactly that and nothing more.

```python
from arraysync import A, Model, computed, on_init

class Profile(Model):
    first = computed(lambda owner, key: owner.get("names")[0])

    @on_init
    def announce(self):
        print("created", self.names)

profile = Profile(names=A(["Ada", "Lovelace"]))  # prints: created ...
profile.first  # "Ada"
```

Declarations
------------

Class attributes that are InitHook or ComputedProperty instances are collected
by ModelMeta and removed from the class namespace, so reading ``owner.first``
goes through ``owner.get("first")``. Subclasses inherit their bases'
declarations; redefining a name replaces the inherited declaration.

Attribute Access
----------------

Public attribute reads and writes are routed to ``get`` and ``set``.
Names starting with an underscore are ordinary instance attributes.
"""

import logging
from typing import Any, Callable, Dict, List, Optional

from .exceptions import invariant

_MISSING = object()

KeyObserver = Callable[["Model", str], Any]


class InitHook:
    """Class-level declaration that runs ``fn(owner)`` once per instance."""

    def __init__(self, fn: Optional[Callable[["Model"], Any]] = None) -> None:
        self._fn = fn
        self.name: Optional[str] = None

    def __set_name__(self, owner: type, name: str) -> None:
        self.name = name

    def install(self, owner: "Model") -> None:
        if self._fn is not None:
            self._fn(owner)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.name!r})"


def on_init(fn: Callable[["Model"], Any]) -> InitHook:
    """Decorator form of InitHook."""
    return InitHook(fn)


class ComputedProperty:
    """
    Accessor with custom read and write behavior.

    ``getter(owner, key)`` produces the value. ``setter(owner, key, value)``
    handles assignment and returns the value that ``set`` should report.
    Values are not cached; every read calls the getter.
    """

    def __init__(
        self,
        getter: Optional[Callable[["Model", str], Any]] = None,
        setter: Optional[Callable[["Model", str, Any], Any]] = None,
    ) -> None:
        self._getter = getter
        self._setter = setter

    def get(self, owner: "Model", key: str) -> Any:
        if self._getter is None:
            return None
        return self._getter(owner, key)

    def set(self, owner: "Model", key: str, value: Any) -> Any:
        invariant(
            self._setter is not None,
            f"Cannot set read-only computed property '{key}' on {owner!r} (value: {value!r})",
        )
        return self._setter(owner, key, value)


def computed(
    getter: Optional[Callable[["Model", str], Any]] = None,
    setter: Optional[Callable[["Model", str, Any], Any]] = None,
) -> ComputedProperty:
    """Create a ComputedProperty, usable as a class attribute on a Model."""
    return ComputedProperty(getter, setter)


def define_computed_property(instance: "Model", key: str, definition: ComputedProperty) -> None:
    """Install ``definition`` at ``key`` on ``instance`` only."""
    invariant(
        isinstance(definition, ComputedProperty),
        f"Cannot define '{key}' on {instance!r}: {definition!r} is not a ComputedProperty",
    )
    instance._values.pop(key, None)
    instance._computed[key] = definition


class ModelMeta(type):
    """
    Metaclass for Model that collects InitHook and ComputedProperty class
    attributes, including inherited ones, in definition order.
    """

    def __new__(mcs, name: str, bases: tuple, namespace: dict) -> type:
        own_hooks: Dict[str, InitHook] = {}
        own_computed: Dict[str, ComputedProperty] = {}
        new_namespace = {}

        for attr_name, attr_value in namespace.items():
            if isinstance(attr_value, InitHook):
                own_hooks[attr_name] = attr_value
            elif isinstance(attr_value, ComputedProperty):
                own_computed[attr_name] = attr_value
            else:
                new_namespace[attr_name] = attr_value

        cls = super().__new__(mcs, name, bases, new_namespace)

        # Removed from the namespace, so type.__new__ did not name them
        for attr_name, hook in own_hooks.items():
            hook.__set_name__(cls, attr_name)

        cls._own_init_hooks = own_hooks
        cls._own_computed_properties = own_computed

        init_hooks: Dict[str, InitHook] = {}
        computed_properties: Dict[str, ComputedProperty] = {}
        for klass in reversed(cls.__mro__):
            init_hooks.update(klass.__dict__.get("_own_init_hooks", {}))
            computed_properties.update(klass.__dict__.get("_own_computed_properties", {}))
        cls._init_hooks = init_hooks
        cls._computed_properties = computed_properties

        return cls


class Model(metaclass=ModelMeta):
    """
    Base class for objects that own observed arrays and derived views.

    Keyword arguments become the initial values. Init hooks run after all of
    them are stored, once per instance, base-class declarations first.
    """

    _init_hooks: Dict[str, InitHook]
    _computed_properties: Dict[str, ComputedProperty]

    def __init__(self, **values: Any) -> None:
        self._values: Dict[str, Any] = {}
        self._computed: Dict[str, ComputedProperty] = {}
        self._key_observers: Dict[str, List[KeyObserver]] = {}
        self._teardowns: List[Callable[[], Any]] = []
        self._instance_state: Dict[Any, Any] = {}
        self._is_destroyed = False

        for key, value in values.items():
            self.set(key, value)

        for hook in type(self)._init_hooks.values():
            hook.install(self)

    # ------------------------------------------------------------------
    # Keyed access
    # ------------------------------------------------------------------

    def _computed_property(self, key: str) -> Optional[ComputedProperty]:
        prop = self._computed.get(key)
        if prop is None:
            prop = type(self)._computed_properties.get(key)
        return prop

    def has_key(self, key: str) -> bool:
        return key in self._values or self._computed_property(key) is not None

    def get(self, key: str) -> Any:
        prop = self._computed_property(key)
        if prop is not None:
            return prop.get(self, key)
        return self._values.get(key)

    def set(self, key: str, value: Any) -> Any:
        prop = self._computed_property(key)
        if prop is not None:
            result = prop.set(self, key, value)
            self._notify_key_observers(key)
            return result

        previous = self._values.get(key, _MISSING)
        self._values[key] = value
        if previous is not value:
            self._notify_key_observers(key)
        return value

    def __getattr__(self, name: str) -> Any:
        if name.startswith("_") or not self.has_key(name):
            raise AttributeError(f"{type(self).__name__!r} object has no attribute {name!r}")
        return self.get(name)

    def __setattr__(self, name: str, value: Any) -> None:
        if name.startswith("_"):
            super().__setattr__(name, value)
        else:
            self.set(name, value)

    # ------------------------------------------------------------------
    # Reference-level observers
    # ------------------------------------------------------------------

    def add_observer(self, key: str, callback: KeyObserver) -> None:
        """Call ``callback(owner, key)`` whenever ``key`` is assigned a new object."""
        observers = self._key_observers.setdefault(key, [])
        if not any(c is callback for c in observers):
            observers.append(callback)

    def remove_observer(self, key: str, callback: KeyObserver) -> None:
        observers = self._key_observers.get(key)
        if observers:
            self._key_observers[key] = [c for c in observers if c is not callback]

    def has_observer(self, key: str, callback: KeyObserver) -> bool:
        return any(c is callback for c in self._key_observers.get(key, ()))

    def _notify_key_observers(self, key: str) -> None:
        for callback in tuple(self._key_observers.get(key, ())):
            callback(self, key)

    # ------------------------------------------------------------------
    # Per-instance state and lifecycle
    # ------------------------------------------------------------------

    def instance_state(self, declaration: Any, factory: Callable[[], Any]) -> Any:
        """Return the state ``declaration`` keeps on this instance, creating it once."""
        if declaration not in self._instance_state:
            self._instance_state[declaration] = factory()
        return self._instance_state[declaration]

    def instance_state_for(self, declaration: Any) -> Any:
        """Return the state ``declaration`` keeps on this instance, or None."""
        return self._instance_state.get(declaration)

    def on_destroy(self, callback: Callable[[], Any]) -> None:
        self._teardowns.append(callback)

    @property
    def is_destroyed(self) -> bool:
        return self._is_destroyed

    def destroy(self) -> None:
        """Run teardown callbacks in reverse registration order, once."""
        if self._is_destroyed:
            return
        self._is_destroyed = True
        logging.debug(f"Destroying {self!r}: {len(self._teardowns)} teardown(s)")
        while self._teardowns:
            self._teardowns.pop()()
        self._key_observers.clear()

    def __repr__(self) -> str:
        fields = ", ".join(f"{key}={value!r}" for key, value in self._values.items())
        return f"{type(self).__name__}({fields})"
