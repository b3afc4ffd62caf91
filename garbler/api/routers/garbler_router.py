import logging
import threading
from typing import Dict, List, Optional, Tuple

from fastapi import APIRouter, HTTPException
from pydantic import BaseModel, Field

from garbler.config import settings
from garbler.services.char_map import rebalance_map, trim_map
from garbler.services.stats_cruncher import StatsCruncher
from garbler.services.stats_library import StatsLibrary
from garbler.services.word_builder import WordBuilder

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/garbler", tags=["garbler"])

# In-memory models: name -> (library, cruncher)
MODEL_CACHE: Dict[str, Tuple[StatsLibrary, StatsCruncher]] = {}
_LOCK = threading.Lock()


class TrainRequest(BaseModel):
    lines: List[str]
    delimiters: str = Field(default_factory=lambda: settings.DEFAULT_DELIMITERS)
    model_name: str = "default"
    case_sensitive: Optional[bool] = None
    reset: bool = False


class GenerateRequest(BaseModel):
    model_name: str = "default"
    count: int = Field(default=1, ge=1, le=100)
    max_length: int = Field(default_factory=lambda: settings.DEFAULT_MAX_LENGTH)
    trim_threshold: float = Field(default_factory=lambda: settings.DEFAULT_TRIM_THRESHOLD)
    seed: Optional[int] = None


class SequenceRequest(BaseModel):
    model_name: str = "default"
    sequence: str


class InfluenceRequest(SequenceRequest):
    offset: int = 0


class RecommendRequest(SequenceRequest):
    rebalance: bool = True
    trim_threshold: Optional[float] = None


class ConfigureRequest(BaseModel):
    model_name: str = "default"
    name: str
    value: float


def _get_model(name: str) -> Tuple[StatsLibrary, StatsCruncher]:
    model = MODEL_CACHE.get(name)
    if not model:
        raise HTTPException(status_code=404, detail="model not found, train first")
    return model


@router.post("/train")
async def train(req: TrainRequest):
    if not req.lines:
        raise HTTPException(status_code=400, detail="lines are empty")
    with _LOCK:
        model = MODEL_CACHE.get(req.model_name)
        if model is None or req.reset:
            library = StatsLibrary(case_sensitive=req.case_sensitive)
            cruncher = StatsCruncher(library)
            MODEL_CACHE[req.model_name] = (library, cruncher)
        else:
            library, cruncher = model
            if req.case_sensitive is not None and req.case_sensitive != library.case_sensitive:
                raise HTTPException(
                    status_code=400,
                    detail="case_sensitive differs from the trained model, retrain with reset",
                )
        for line in req.lines:
            library.parse_line(line, req.delimiters)
        cruncher.recalculate_metrics()
        cruncher.clear_cache()
    logger.info(f"[Garbler] Trained {req.model_name}: {library.words_parsed} words")
    return {
        "ok": True,
        "data": {
            "model": req.model_name,
            "words": library.words_parsed,
            "alphabet": library.alphabet(),
        },
    }


@router.post("/generate")
async def generate(req: GenerateRequest):
    _, cruncher = _get_model(req.model_name)
    builder = WordBuilder(cruncher, seed=req.seed)
    try:
        with _LOCK:
            words = builder.generate_words(req.count, req.max_length, req.trim_threshold)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return {"ok": True, "data": {"words": words}}


@router.post("/influence")
async def influence(req: InfluenceRequest):
    library, _ = _get_model(req.model_name)
    try:
        with _LOCK:
            influence_map = library.influence_map(req.sequence, req.offset)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return {
        "ok": True,
        "data": {c: occurrences.values() for c, occurrences in influence_map.items()},
    }


@router.post("/recommend")
async def recommend(req: RecommendRequest):
    _, cruncher = _get_model(req.model_name)
    try:
        with _LOCK:
            recommendations = cruncher.generate_append_recommendations(req.sequence)
        if req.trim_threshold is not None:
            trim_map(recommendations, req.trim_threshold)
        if req.rebalance:
            rebalance_map(recommendations)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return {"ok": True, "data": recommendations.to_dict()}


@router.post("/eow")
async def eow(req: SequenceRequest):
    _, cruncher = _get_model(req.model_name)
    with _LOCK:
        factor = cruncher.eow_factor(req.sequence)
    return {"ok": True, "data": {"factor": factor}}


@router.post("/configure")
async def configure(req: ConfigureRequest):
    _, cruncher = _get_model(req.model_name)
    try:
        with _LOCK:
            cruncher.configure(req.name, req.value)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return {"ok": True, "data": cruncher.factors()}


@router.get("/cache/{model_name}")
async def cache_contents(model_name: str):
    _, cruncher = _get_model(model_name)
    return {
        "ok": True,
        "data": {
            "primary": cruncher.primary_cache_contents(),
            "secondary": cruncher.secondary_cache_contents(),
        },
    }
