from contextlib import asynccontextmanager
import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker

from inspection_api.api.routers.dynamic_tables import router as dynamic_tables_router
from inspection_api.api.routers.label_templates import router as label_templates_router
from inspection_api.core.config import settings, split_csv
from inspection_api.core.errors import register_exception_handlers
from inspection_api.core.flow_logging import configure_logging, flow_info
from inspection_api.db import session as db_session
from inspection_api.models.label_template import LabelTemplate
from inspection_api.services.schema_cache import SchemaLoader

logger = logging.getLogger(__name__)


def create_app(engine: Engine | None = None) -> FastAPI:
    configure_logging()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        bound = engine or db_session.engine
        LabelTemplate.__table__.create(bind=bound, checkfirst=True)

        loader = SchemaLoader(
            bound,
            excluded_tables=split_csv(settings.DYNAMIC_API_EXCLUDED_TABLES),
            fail_fast=settings.DYNAMIC_API_SCHEMA_FAIL_FAST,
        )
        app.state.schema_cache = loader.load_all_schemas()
        flow_info(
            logger,
            "dynamic_api_ready prefix=%s tables=%s",
            settings.API_PREFIX,
            len(app.state.schema_cache),
            category="schema",
        )
        yield
        app.state.schema_cache = None

    app = FastAPI(title="Inspection Shop API", lifespan=lifespan)
    if engine is not None:
        app.state.session_factory = sessionmaker(autocommit=False, autoflush=False, bind=engine)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=split_csv(settings.CORS_ORIGINS) or ["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )
    register_exception_handlers(app)

    # Fixed routes first: "/{table_name}" would otherwise capture "/labels".
    app.include_router(label_templates_router, prefix=settings.API_PREFIX)
    app.include_router(dynamic_tables_router, prefix=settings.API_PREFIX)

    @app.get("/health")
    def health():
        return {"status": "up"}

    return app


app = create_app()
