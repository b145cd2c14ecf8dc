import logging

import pytest
from fastapi import APIRouter, FastAPI
from httpx import ASGITransport, AsyncClient

from regdesk.core.registry import (
    DescriptorKind,
    DomainModule,
    ModuleRegistry,
    RouteDescriptor,
)
from regdesk.modules import DOMAIN_MODULES


def _router(path: str, name: str) -> APIRouter:
    router = APIRouter()

    @router.get(path)
    async def endpoint():
        return {"domain": name}

    return router


def _simple(path: str, name: str) -> DomainModule:
    return DomainModule(name, lambda: RouteDescriptor.simple(_router(path, name)))


def _broken() -> RouteDescriptor:
    raise RuntimeError("descriptor exploded")


async def _get(app: FastAPI, path: str):
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        return await client.get(path)


@pytest.mark.asyncio
async def test_failing_domain_does_not_block_its_peers():
    app = FastAPI()
    registry = ModuleRegistry(
        [_simple("/first", "first"), DomainModule("second", _broken), _simple("/third", "third")]
    )

    report = registry.register_all(app, prefix="/api")

    assert report.registered == ["first", "third"]
    assert report.failed_domains() == ["second"]
    assert report.failures[0].error == "descriptor exploded"
    assert not report.ok
    assert (await _get(app, "/api/first")).json() == {"domain": "first"}
    assert (await _get(app, "/api/third")).json() == {"domain": "third"}


def test_unimportable_domain_is_recorded():
    app = FastAPI()
    registry = ModuleRegistry(
        [
            DomainModule.from_path("ghost", "regdesk.modules.ghost.routes:route_descriptor"),
            _simple("/alive", "alive"),
        ]
    )

    report = registry.register_all(app)

    assert report.failed_domains() == ["ghost"]
    assert report.registered == ["alive"]


def test_module_without_factory_counts_as_missing_descriptor():
    app = FastAPI()
    registry = ModuleRegistry([DomainModule.from_path("bare", "regdesk.core.events:route_descriptor")])

    report = registry.register_all(app)

    assert report.skipped == ["bare"]
    assert report.ok


def test_missing_descriptor_warns_by_default(caplog):
    app = FastAPI()
    registry = ModuleRegistry([DomainModule("empty", lambda: None), _simple("/ok", "ok")])

    with caplog.at_level(logging.WARNING, logger="regdesk.core.registry"):
        report = registry.register_all(app)

    assert report.skipped == ["empty"]
    assert report.registered == ["ok"]
    assert report.ok
    assert "empty" in caplog.text


def test_missing_descriptor_can_be_ignored_quietly(caplog):
    registry = ModuleRegistry([DomainModule("empty", lambda: None)], missing_descriptor="ignore")

    with caplog.at_level(logging.WARNING, logger="regdesk.core.registry"):
        report = registry.register_all(FastAPI())

    assert report.skipped == ["empty"]
    assert caplog.records == []


def test_missing_descriptor_as_error_is_a_failure():
    registry = ModuleRegistry(
        [DomainModule("empty", lambda: None), _simple("/ok", "ok")],
        missing_descriptor="error",
    )

    report = registry.register_all(FastAPI())

    assert report.failed_domains() == ["empty"]
    assert report.skipped == []
    assert report.registered == ["ok"]


def test_non_descriptor_value_is_treated_as_missing():
    registry = ModuleRegistry([DomainModule("odd", lambda: {"router": None})])
    report = registry.register_all(FastAPI())
    assert report.skipped == ["odd"]


@pytest.mark.asyncio
async def test_hook_runs_once_after_router_is_mounted():
    app = FastAPI()
    calls = []

    async def shadow():
        return {"domain": "hook"}

    def init_event_handlers(target):
        calls.append(target)
        # only answers if the domain router was not mounted before it
        target.add_api_route("/api/hooked", shadow)

    registry = ModuleRegistry(
        [DomainModule("hooked", lambda: RouteDescriptor.with_hook(_router("/hooked", "hooked"), init_event_handlers))]
    )

    report = registry.register_all(app, prefix="/api")

    assert report.registered == ["hooked"]
    assert calls == [app]
    assert (await _get(app, "/api/hooked")).json() == {"domain": "hooked"}


def test_failing_hook_is_recorded_for_its_domain():
    def init_event_handlers(target):
        raise ValueError("bus unavailable")

    registry = ModuleRegistry(
        [
            DomainModule("hooked", lambda: RouteDescriptor.with_hook(_router("/hooked", "hooked"), init_event_handlers)),
            _simple("/after", "after"),
        ]
    )

    report = registry.register_all(FastAPI())

    assert report.failed_domains() == ["hooked"]
    assert report.registered == ["after"]


@pytest.mark.asyncio
async def test_dual_descriptor_mounts_auth_routes_first():
    app = FastAPI()
    auth = _router("/auth/{item}", "auth")
    admin = _router("/auth/admin", "admin")
    registry = ModuleRegistry([DomainModule("dual", lambda: RouteDescriptor.dual(auth, admin))])

    registry.register_all(app)

    assert (await _get(app, "/auth/admin")).json() == {"domain": "auth"}


def test_descriptor_constructors_tag_their_kind():
    router = APIRouter()
    assert RouteDescriptor.simple(router).kind is DescriptorKind.SIMPLE
    assert RouteDescriptor.with_hook(router, lambda app: None).kind is DescriptorKind.WITH_HOOK
    assert RouteDescriptor.dual(router, router).kind is DescriptorKind.DUAL


def test_manifest_order():
    assert [module.name for module in DOMAIN_MODULES] == [
        "system",
        "accounts",
        "registrations",
        "payments",
        "statistics",
        "admin",
    ]


@pytest.mark.asyncio
async def test_application_registers_every_domain(app):
    report = app.state.registration_report
    assert report.ok
    assert report.registered == [module.name for module in DOMAIN_MODULES]
