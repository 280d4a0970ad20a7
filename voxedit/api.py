"""
REST API for voxedit.

Provides waveform and silence analysis of uploaded recordings via HTTP.
"""

from fastapi import FastAPI, UploadFile, File, Form, HTTPException
from pydantic import BaseModel
from typing import Optional
import tempfile
import shutil
from pathlib import Path
import os

from . import __version__
from .core.cache import AnalysisCache
from .core.errors import VoxEditError

app = FastAPI(
    title="voxedit API",
    description="Waveform and silence analysis for voice recordings",
    version=__version__
)


class WaveformResponse(BaseModel):
    """Response model for a waveform slice."""
    duration: float
    start: float
    end: float
    level: int
    points: list[float]


class SilenceRange(BaseModel):
    start: float
    end: float
    duration: float


class SilenceResponse(BaseModel):
    """Response model for silence detection."""
    duration: float
    threshold_db: float
    min_duration: float
    ranges: list[SilenceRange]
    silence_time: float


def _save_upload(file: UploadFile) -> str:
    suffix = Path(file.filename or "upload.wav").suffix
    with tempfile.NamedTemporaryFile(delete=False, suffix=suffix) as tmp:
        shutil.copyfileobj(file.file, tmp)
        return tmp.name


@app.get("/")
async def root():
    """API health check."""
    return {"status": "ok", "service": "voxedit", "version": __version__}


@app.post("/waveform", response_model=WaveformResponse)
async def waveform(
    file: UploadFile = File(...),
    start: float = Form(0.0),
    end: Optional[float] = Form(None),
    points: int = Form(100)
):
    """
    Waveform points for a time range of the uploaded file.

    - **file**: Audio file (WAV, FLAC, ...)
    - **start**: Range start in seconds
    - **end**: Range end in seconds (default: end of file)
    - **points**: Number of points to return
    """
    tmp_path = _save_upload(file)
    try:
        pyramid = await AnalysisCache().get_waveform(tmp_path)
    except VoxEditError as e:
        raise HTTPException(status_code=422, detail=str(e))
    finally:
        if os.path.exists(tmp_path):
            os.unlink(tmp_path)

    end = pyramid.duration_seconds if end is None else end
    return WaveformResponse(
        duration=pyramid.duration_seconds,
        start=start,
        end=end,
        level=pyramid.level_for_range(start, end, points),
        points=[float(v) for v in pyramid.slice(start, end, points)],
    )


@app.post("/silence", response_model=SilenceResponse)
async def silence(
    file: UploadFile = File(...),
    threshold_db: float = Form(-40.0),
    min_duration: float = Form(0.25)
):
    """
    Detect silent ranges in the uploaded file.
    """
    tmp_path = _save_upload(file)
    cache = AnalysisCache()
    try:
        pyramid = await cache.get_waveform(tmp_path)
        intervals = await cache.get_silence(tmp_path, threshold_db, min_duration)
    except VoxEditError as e:
        raise HTTPException(status_code=422, detail=str(e))
    finally:
        if os.path.exists(tmp_path):
            os.unlink(tmp_path)

    return SilenceResponse(
        duration=pyramid.duration_seconds,
        threshold_db=threshold_db,
        min_duration=min_duration,
        ranges=[SilenceRange(start=i.start, end=i.end, duration=i.duration) for i in intervals],
        silence_time=sum(i.duration for i in intervals),
    )
