"""FastAPI application exposing commitsplit over JSON-RPC."""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Any, Callable, Dict, List, Mapping, Optional, Tuple

try:  # pragma: no cover - optional dependency
    from fastapi import FastAPI, Request
    from fastapi.responses import JSONResponse
    from pydantic import BaseModel, ValidationError

    _FASTAPI_AVAILABLE = True
except ModuleNotFoundError:  # pragma: no cover - service mode optional
    FastAPI = None  # type: ignore[assignment]
    Request = None  # type: ignore[assignment]
    JSONResponse = None  # type: ignore[assignment]
    BaseModel = object  # type: ignore[assignment]
    ValidationError = ValueError  # type: ignore[assignment]
    _FASTAPI_AVAILABLE = False

from ..config import ConfigError, CrossRepoAnalysisConfig, load_config
from ..logging import get_logger
from ..orchestrator import Orchestrator
from ..repos import CyclicDependencyError, RepositoryManager, load_repository_config

PARSE_ERROR = -32700
INVALID_REQUEST = -32600
METHOD_NOT_FOUND = -32601
INVALID_PARAMS = -32602
INTERNAL_ERROR = -32603
CYCLIC_DEPENDENCY = -32000

ManagerLoader = Callable[[Mapping[str, Any]], Tuple[RepositoryManager, CrossRepoAnalysisConfig]]

_LOGGER = get_logger("service")


class JsonRpcRequest(BaseModel):
    jsonrpc: str = "2.0"
    method: str
    params: Dict[str, Any] = {}
    id: Optional[Any] = None


class JsonRpcError(BaseModel):
    code: int
    message: str
    data: Optional[Any] = None


class JsonRpcResponse(BaseModel):
    jsonrpc: str = "2.0"
    id: Optional[Any] = None
    result: Optional[Any] = None
    error: Optional[JsonRpcError] = None


class HealthResponse(BaseModel):
    status: str


class InvalidParams(ValueError):
    """Raised when JSON-RPC params are missing or malformed."""


def _default_orchestrator() -> Orchestrator:
    return Orchestrator()


def make_manager_loader(default_path: Path | None = None) -> ManagerLoader:
    """Resolve repositories and analysis settings from request params.

    ``configPath`` may point at ``.commitsplit.yml`` (or its directory) or
    directly at a JSON/TOML repository declaration file; ``reposDir`` names
    the workspace directory. Without either, ``default_path`` is used.
    """

    def _load(params: Mapping[str, Any]) -> Tuple[RepositoryManager, CrossRepoAnalysisConfig]:
        raw = params.get("configPath") or params.get("reposDir")
        if raw is not None and not isinstance(raw, str):
            raise InvalidParams("configPath and reposDir must be strings")
        base = Path(raw) if raw else (default_path or Path.cwd())
        if base.suffix.lower() in {".json", ".toml"}:
            return load_repository_config(base), CrossRepoAnalysisConfig()
        settings = load_config(base)
        return load_repository_config(settings.repos_config_path), settings.analysis

    return _load


def create_app(
    orchestrator_factory: Callable[[], Orchestrator] = _default_orchestrator,
    manager_loader: ManagerLoader | None = None,
) -> FastAPI:
    """Create the FastAPI application exposing the multi-repository tools."""

    if not _FASTAPI_AVAILABLE:  # pragma: no cover - validated via unit tests
        raise RuntimeError(
            "FastAPI is required for service mode. Install it with `pip install commitsplit[service]`."
        )

    app = FastAPI(title="commitsplit", version="1.0.0")
    loader = manager_loader or make_manager_loader()

    def _analyze(params: Mapping[str, Any]) -> Dict[str, Any]:
        manager, config = _workspace(loader, params)
        summary = orchestrator_factory().summarize(
            manager, _repository_names(params), _commit_range(params), config
        )
        return summary.to_dict()

    def _propose(params: Mapping[str, Any]) -> Dict[str, Any]:
        manager, config = _workspace(loader, params)
        proposal = orchestrator_factory().analyze(
            manager, _repository_names(params), _commit_range(params), config
        )
        return proposal.to_dict()

    def _plan(params: Mapping[str, Any]) -> Dict[str, Any]:
        manager, config = _workspace(loader, params)
        orchestrator = orchestrator_factory()
        proposal = orchestrator.analyze(
            manager, _repository_names(params), _commit_range(params), config
        )
        steps = orchestrator.plan_execution(manager, proposal)
        return {
            "proposal": proposal.to_dict(),
            "steps": [step.to_dict() for step in steps],
        }

    def _order(params: Mapping[str, Any]) -> Dict[str, Any]:
        manager, _ = _workspace(loader, params)
        return {"order": manager.dependency_order()}

    methods: Dict[str, Callable[[Mapping[str, Any]], Dict[str, Any]]] = {
        "analyzeMultiRepoCommits": _analyze,
        "proposeMultiRepoSplit": _propose,
        "planMultiRepoSplit": _plan,
        "getDependencyOrder": _order,
    }

    @app.get("/health", response_model=HealthResponse)
    async def health() -> HealthResponse:
        return HealthResponse(status="ok")

    @app.post("/jsonrpc")
    async def jsonrpc(request: Request) -> JSONResponse:
        try:
            body = await request.json()
        except ValueError:
            return _error_response(None, PARSE_ERROR, "Parse error")

        request_id = body.get("id") if isinstance(body, dict) else None
        try:
            call = JsonRpcRequest.model_validate(body)
        except ValidationError as exc:
            return _error_response(request_id, INVALID_REQUEST, "Invalid request", str(exc))
        if call.jsonrpc != "2.0":
            return _error_response(call.id, INVALID_REQUEST, "Invalid request", "jsonrpc must be '2.0'")

        handler = methods.get(call.method)
        if handler is None:
            return _error_response(call.id, METHOD_NOT_FOUND, f"Method not found: {call.method}")

        loop = asyncio.get_running_loop()
        try:
            result = await loop.run_in_executor(None, handler, call.params)
        except (InvalidParams, ConfigError) as exc:
            return _error_response(call.id, INVALID_PARAMS, "Invalid params", str(exc))
        except CyclicDependencyError as exc:
            return _error_response(
                call.id, CYCLIC_DEPENDENCY, str(exc), {"cycle": list(exc.cycle)}
            )
        except Exception as exc:
            _LOGGER.exception("JSON-RPC method %s failed", call.method)
            return _error_response(call.id, INTERNAL_ERROR, "Internal error", str(exc))

        response = JsonRpcResponse(id=call.id, result=result)
        return JSONResponse(content=response.model_dump(exclude={"error"}))

    return app


def _error_response(
    request_id: Any, code: int, message: str, data: Any = None
) -> JSONResponse:
    response = JsonRpcResponse(
        id=request_id, error=JsonRpcError(code=code, message=message, data=data)
    )
    return JSONResponse(content=response.model_dump(exclude={"result"}))


def _workspace(
    loader: ManagerLoader, params: Mapping[str, Any]
) -> Tuple[RepositoryManager, CrossRepoAnalysisConfig]:
    manager, config = loader(params)
    overrides = params.get("config")
    if overrides is not None:
        if not isinstance(overrides, dict):
            raise InvalidParams("config must be an object")
        config = config.with_overrides(overrides)
    return manager, config


def _commit_range(params: Mapping[str, Any]) -> str:
    value = params.get("commitRange")
    if not isinstance(value, str) or not value.strip():
        raise InvalidParams("commitRange is required")
    return value


def _repository_names(params: Mapping[str, Any]) -> List[str]:
    raw = params.get("repositories")
    if raw is None:
        return []
    if not isinstance(raw, list):
        raise InvalidParams("repositories must be a list")
    names: List[str] = []
    for item in raw:
        if isinstance(item, str):
            names.append(item)
        elif isinstance(item, dict) and isinstance(item.get("name"), str):
            names.append(item["name"])
        else:
            raise InvalidParams(f"Invalid repository entry: {item!r}")
    return names


def run_service(
    host: str = "127.0.0.1", port: int = 8000, config_path: Path | None = None
) -> None:  # pragma: no cover - integration path
    if not _FASTAPI_AVAILABLE:
        raise RuntimeError(
            "FastAPI is required for service mode. Install it with `pip install commitsplit[service]`."
        )

    try:
        import uvicorn
    except ModuleNotFoundError as exc:  # pragma: no cover - optional dependency
        raise RuntimeError(
            "uvicorn is required to run the service. Install it with `pip install uvicorn`."
        ) from exc

    app = create_app(manager_loader=make_manager_loader(config_path))
    uvicorn.run(app, host=host, port=port, log_config=None)
