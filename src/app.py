"""Billing FastAPI application.

Web server the host platform calls for subscription checkout, scheduled
renewals and deferred capture. Every request runs inside the billing
domain context so customer records resolve against its repositories.

Usage:
    uvicorn src.app:app --host 0.0.0.0 --port 8000 --reload
"""

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from billing.api.routes import billing_router, get_orchestrator
from billing.charging.orchestrator import ChargeOrchestrator
from billing.config import BillingConfig
from billing.domain import billing, logger
from billing.wiring import build_orchestrator


def create_app(orchestrator: ChargeOrchestrator | None = None) -> FastAPI:
    billing.init()
    if orchestrator is None:
        orchestrator = build_orchestrator(BillingConfig.from_env())

    app = FastAPI(
        title="Billing API",
        description="Subscription checkout, renewal and capture",
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def domain_context_middleware(request: Request, call_next):
        """Push the billing domain context for each request."""
        with billing.domain_context():
            return await call_next(request)

    app.dependency_overrides[get_orchestrator] = lambda: orchestrator
    app.include_router(billing_router)

    @app.get("/health")
    async def health():
        return JSONResponse(
            content={
                "status": "ok",
                "domains": {"billing": {"name": billing.name}},
                "mode": orchestrator.config.mode,
                "processor": type(orchestrator.processor).__name__,
            }
        )

    logger.info("billing_app_created", mode=orchestrator.config.mode)
    return app


app = create_app()
