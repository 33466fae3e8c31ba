"""Component registry for PatternForge.

Stimulus generators and pattern codecs are looked up by a string tag (the
stimulus ``type`` in a config file, or a generation name such as ``"G4.1"``).
Instead of module-level lookup tables, registries are plain objects built by
the factories in :mod:`patternforge.register_components` and handed to the
code that needs them.

Example:
    >>> from patternforge.register_components import build_generator_registry
    >>> generators = build_generator_registry()
    >>> generator = generators.create("looming", config={"initial_size": 0.1,
    ...                                                 "final_size": 1.0})
"""

from __future__ import annotations

from typing import Any, Callable, Dict, List, Optional, Tuple, Type
import warnings


class ComponentRegistry:
    """Generic registry for component classes.

    Components register themselves with a string name, then can be
    instantiated by name with keyword arguments.

    Attributes:
        _registry: Dict mapping component name -> (class, factory_func)
            factory_func is optional - if None, class is instantiated directly
    """

    def __init__(self, registry_name: str = "ComponentRegistry"):
        """Initialize empty registry.

        Args:
            registry_name: Name for error messages (e.g., "GENERATORS").
        """
        self._registry: Dict[str, Tuple[Type, Optional[Callable]]] = {}
        self._name = registry_name

    def register(
        self,
        name: str,
        cls: Type,
        factory_func: Optional[Callable] = None,
    ) -> None:
        """Register a component class.

        Args:
            name: String identifier for this component (e.g., "looming").
            cls: Component class.
            factory_func: Optional factory function. If provided, this is called
                instead of cls(**kwargs).

        Note:
            Registering the same class twice under one name is a no-op.
            Replacing a name with a different class warns.
        """
        if name in self._registry:
            existing_cls, _ = self._registry[name]
            if existing_cls is cls:
                return
            warnings.warn(
                f"{self._name}: Component '{name}' already registered with "
                f"{existing_cls.__name__}, overwriting with {cls.__name__}",
                UserWarning,
            )
        self._registry[name] = (cls, factory_func)

    def create(self, name: str, **kwargs) -> Any:
        """Create a component instance by name.

        A single ``config`` keyword is routed to the class's ``from_config``.

        Args:
            name: Registered component name.
            **kwargs: Arguments passed to component constructor or factory_func.

        Returns:
            Component instance.

        Raises:
            KeyError: If name is not registered.
        """
        cls, factory_func = self._lookup(name)

        if factory_func is not None:
            return factory_func(**kwargs)
        if set(kwargs) == {"config"} and hasattr(cls, "from_config"):
            return cls.from_config(kwargs["config"])
        return cls(**kwargs)

    def list_registered(self) -> List[str]:
        """List all registered component names, sorted."""
        return sorted(self._registry.keys())

    def is_registered(self, name: str) -> bool:
        """Check if a component name is registered."""
        return name in self._registry

    def get_class(self, name: str) -> Type:
        """Get the registered class for a component name.

        Raises:
            KeyError: If name is not registered.
        """
        cls, _ = self._lookup(name)
        return cls

    def _lookup(self, name: str) -> Tuple[Type, Optional[Callable]]:
        if name not in self._registry:
            available = ", ".join(sorted(self._registry.keys()))
            raise KeyError(
                f"{self._name}: Component '{name}' not registered. "
                f"Available: {available}"
            )
        return self._registry[name]

    def __contains__(self, name: str) -> bool:
        return name in self._registry

    def __len__(self) -> int:
        return len(self._registry)
