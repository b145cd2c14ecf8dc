"""Composition of independently developed domain modules into one HTTP surface.

Each domain contributes a :class:`RouteDescriptor` through a factory listed in
the manifest (:data:`regdesk.modules.DOMAIN_MODULES`). The registry mounts the
descriptors in manifest order and isolates every domain from its peers: a
domain that fails to load or mount is logged, recorded and skipped.
"""

from __future__ import annotations

import enum
import importlib
import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Literal, Optional, Sequence

from fastapi import APIRouter, FastAPI

logger = logging.getLogger(__name__)

MissingDescriptorPolicy = Literal["ignore", "warn", "error"]


class DescriptorKind(str, enum.Enum):
    SIMPLE = "simple"
    WITH_HOOK = "with_hook"
    DUAL = "dual"


@dataclass(frozen=True, slots=True)
class RouteDescriptor:
    """What a domain contributes to the application.

    Build one with :meth:`simple`, :meth:`with_hook` or :meth:`dual` rather
    than filling the fields by hand.
    """

    kind: DescriptorKind
    router: Optional[APIRouter] = None
    init_event_handlers: Optional[Callable[[FastAPI], Any]] = None
    auth_router: Optional[APIRouter] = None
    admin_router: Optional[APIRouter] = None

    @classmethod
    def simple(cls, router: APIRouter) -> "RouteDescriptor":
        return cls(kind=DescriptorKind.SIMPLE, router=router)

    @classmethod
    def with_hook(cls, router: APIRouter, init_event_handlers: Callable[[FastAPI], Any]) -> "RouteDescriptor":
        return cls(kind=DescriptorKind.WITH_HOOK, router=router, init_event_handlers=init_event_handlers)

    @classmethod
    def dual(cls, auth_router: APIRouter, admin_router: APIRouter) -> "RouteDescriptor":
        return cls(kind=DescriptorKind.DUAL, auth_router=auth_router, admin_router=admin_router)


DescriptorFactory = Callable[[], Optional[RouteDescriptor]]


@dataclass(frozen=True, slots=True)
class DomainModule:
    name: str
    factory: DescriptorFactory

    @classmethod
    def from_path(cls, name: str, target: str) -> "DomainModule":
        """Declare a domain by ``"package.module:callable"``, imported at registration time."""
        module_path, _, attribute = target.partition(":")

        def load() -> Optional[RouteDescriptor]:
            module = importlib.import_module(module_path)
            factory = getattr(module, attribute or "route_descriptor", None)
            if factory is None:
                return None
            return factory()

        return cls(name=name, factory=load)


@dataclass(slots=True)
class RegistrationFailure:
    domain: str
    error: str


@dataclass(slots=True)
class RegistrationReport:
    registered: list[str] = field(default_factory=list)
    skipped: list[str] = field(default_factory=list)
    failures: list[RegistrationFailure] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.failures

    def failed_domains(self) -> list[str]:
        return [failure.domain for failure in self.failures]


class MissingDescriptorError(RuntimeError):
    """A domain produced no usable route descriptor."""


class ModuleRegistry:
    """Mounts every domain in ``modules`` onto a FastAPI application.

    Usage:
        registry = ModuleRegistry(DOMAIN_MODULES, missing_descriptor="warn")
        report = registry.register_all(app, prefix="/api")
    """

    def __init__(
        self,
        modules: Sequence[DomainModule],
        *,
        missing_descriptor: MissingDescriptorPolicy = "warn",
    ) -> None:
        self._modules = tuple(modules)
        self._missing_descriptor = missing_descriptor

    @property
    def modules(self) -> tuple[DomainModule, ...]:
        return self._modules

    def register_all(self, app: FastAPI, prefix: str = "") -> RegistrationReport:
        report = RegistrationReport()
        for module in self._modules:
            try:
                descriptor = module.factory()
                if not isinstance(descriptor, RouteDescriptor):
                    self._handle_missing(module, descriptor, report)
                    continue
                self._mount(app, prefix, descriptor)
            except Exception as exc:  # pylint: disable=broad-except
                logger.exception("Failed to register domain %s", module.name)
                error = str(exc) or type(exc).__name__
                report.failures.append(RegistrationFailure(domain=module.name, error=error))
                continue
            report.registered.append(module.name)
            logger.info("Registered domain %s (%s)", module.name, descriptor.kind.value)

        logger.info(
            "Domain registration finished: %d registered, %d skipped, %d failed",
            len(report.registered),
            len(report.skipped),
            len(report.failures),
        )
        return report

    def _handle_missing(self, module: DomainModule, descriptor: Any, report: RegistrationReport) -> None:
        detail = "no route descriptor" if descriptor is None else f"unsupported descriptor {type(descriptor).__name__}"
        if self._missing_descriptor == "error":
            raise MissingDescriptorError(f"Domain {module.name} has {detail}")
        if self._missing_descriptor == "warn":
            logger.warning("Domain %s has %s; skipping", module.name, detail)
        else:
            logger.debug("Domain %s has %s; skipping", module.name, detail)
        report.skipped.append(module.name)

    @staticmethod
    def _mount(app: FastAPI, prefix: str, descriptor: RouteDescriptor) -> None:
        if descriptor.kind is DescriptorKind.SIMPLE:
            app.include_router(descriptor.router, prefix=prefix)
        elif descriptor.kind is DescriptorKind.WITH_HOOK:
            app.include_router(descriptor.router, prefix=prefix)
            descriptor.init_event_handlers(app)
        elif descriptor.kind is DescriptorKind.DUAL:
            # auth routes are always mounted before admin routes
            app.include_router(descriptor.auth_router, prefix=prefix)
            app.include_router(descriptor.admin_router, prefix=prefix)
        else:
            raise ValueError(f"Unknown descriptor kind: {descriptor.kind!r}")


__all__ = [
    "DescriptorKind",
    "DomainModule",
    "MissingDescriptorError",
    "ModuleRegistry",
    "RegistrationFailure",
    "RegistrationReport",
    "RouteDescriptor",
]
