import logging
import os
from typing import List

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pymongo.errors import PyMongoError

from .interpreter import interpret
from .mongo_client import COLLECTION, DB_NAME, MAX_RESULTS, ensure_indexes, find_properties
from .predicates import build_predicates
from .schemas import AISearchRequest, AISearchResponse, Suggestion
from .summary import summarize

logging.basicConfig(
    level=os.getenv("LOG_LEVEL", "INFO").upper(),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(title="RealEstate AI Search Service", version="0.3.0")

SUGGESTIONS = [
    Suggestion(text="3-bedroom apartment in Cyprus under $300k", category="Popular", icon="home"),
    Suggestion(text="Properties with highest ROI in Greece", category="Investment", icon="trending-up"),
    Suggestion(text="Golden Visa eligible properties", category="Residency", icon="shield"),
    Suggestion(text="New build properties in Georgia", category="Status", icon="building"),
    Suggestion(text="Apartments with good rental yield", category="Income", icon="dollar-sign"),
    Suggestion(text="Luxury villas between $500k and $1M", category="Luxury", icon="star"),
]


@app.on_event("startup")
def startup_event():
    try:
        ensure_indexes()
    except PyMongoError:
        logger.exception("could not ensure indexes on %s.%s", DB_NAME, COLLECTION)


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    return JSONResponse(
        status_code=400,
        content={
            "error": "Validation Error",
            "message": "Invalid search query",
            "details": jsonable_encoder(exc.errors()),
        },
    )


@app.exception_handler(PyMongoError)
async def storage_error_handler(request: Request, exc: PyMongoError):
    logger.error("storage failure on %s: %s", request.url.path, exc, exc_info=exc)
    return JSONResponse(
        status_code=500,
        content={"error": "Internal Server Error", "message": "Failed to process AI search"},
    )


@app.exception_handler(Exception)
async def unexpected_error_handler(request: Request, exc: Exception):
    logger.error("unexpected failure on %s", request.url.path, exc_info=exc)
    return JSONResponse(
        status_code=500,
        content={"error": "Internal Server Error", "message": "Failed to process AI search"},
    )


@app.get("/health")
def health():
    return {"status": "ok", "database": DB_NAME, "collection": COLLECTION}


@app.post("/api/ai-search", response_model=AISearchResponse)
def ai_search(req: AISearchRequest):
    # req.context is accepted but does not influence interpretation
    filters = interpret(req.query)
    predicates, sort_keys = build_predicates(filters)

    properties, total = find_properties(predicates, sort_keys, limit=MAX_RESULTS)
    logger.info("ai-search %r matched %d (returning %d)", req.query, total, len(properties))

    return AISearchResponse(
        query=req.query,
        filters=filters.model_dump(mode="json", exclude_none=True),
        summary=summarize(req.query, filters, len(properties)),
        properties=properties,
        count=len(properties),
    )


@app.get("/api/ai-search/suggestions", response_model=List[Suggestion])
def suggestions():
    return SUGGESTIONS
