# ========================
# api_server.py
# ========================

"""
FastAPI Server for the Retail Sales Pipeline

Provides REST endpoints to run the pipeline over the configured source (the
CSV named by PIPELINE_INPUT_FILE, else the built-in dataset) or an uploaded
CSV export, and fetch the resulting report views.
"""

import os
import logging
import tempfile
from datetime import datetime
from typing import Any, Dict, Optional

from fastapi import FastAPI, File, UploadFile, HTTPException, Query
import uvicorn

from src.retail_pipeline import RetailSalesPipeline, PipelineError, VIEW_NAMES
from src.utils.config import Config
from src.utils.logging_setup import setup_logging

config = Config()

# Setup logging
setup_logging(config)
logger = logging.getLogger(__name__)

# Initialize FastAPI app
app = FastAPI(
    title="Retail Sales Pipeline API",
    description="Clean the retail sales dataset and serve its report views",
    version="1.0.0"
)


def _execute(input_file: Optional[str] = None, save: bool = False) -> Dict[str, Any]:
    """Run the pipeline, mapping fatal pipeline errors to HTTP 422."""
    pipeline = RetailSalesPipeline(config=config, input_file=input_file)
    try:
        return pipeline.run(save=save)
    except PipelineError as e:
        logger.warning(f"Pipeline rejected input: {e}")
        raise HTTPException(status_code=422, detail=str(e))


def _serialize(results: Dict[str, Any]) -> Dict[str, Any]:
    return {
        'status': results['pipeline_status'],
        'source': results['source'],
        'cleaning_stats': results['cleaning_stats'],
        'raw_quality': results['raw_quality'].to_dict(),
        'quality_report': results['quality_report'].to_dict(),
        'views': {name: table.to_dict() for name, table in results['views'].items()},
        'saved_files': results['saved_files'],
    }


@app.get("/")
def root():
    """Root endpoint with API information."""
    return {
        "message": "Retail Sales Pipeline API",
        "version": "1.0.0",
        "endpoints": {
            "health": "GET /health",
            "views": "GET /views",
            "view": "GET /views/{name}",
            "quality": "GET /quality",
            "run": "POST /run",
            "upload": "POST /upload"
        }
    }


@app.get("/health")
def health_check():
    """Health check endpoint."""
    return {
        "status": "healthy",
        "timestamp": datetime.now().isoformat()
    }


@app.get("/views")
def list_views():
    """Names of the available report views."""
    return {"views": VIEW_NAMES}


@app.get("/views/{name}")
def get_view(name: str):
    """Compute one report view over the configured source."""
    if name not in VIEW_NAMES:
        raise HTTPException(status_code=404, detail=f"Unknown view: {name}")
    results = _execute()
    return results['views'][name].to_dict()


@app.get("/quality")
def get_quality():
    """Raw data profile and final quality report for the configured source."""
    results = _execute()
    return {
        "raw_quality": results['raw_quality'].to_dict(),
        "quality_report": results['quality_report'].to_dict()
    }


@app.post("/run")
def run_pipeline(save: bool = Query(False, description="Write outputs to the configured directory")):
    """Run the full pipeline over the configured source."""
    logger.info(f"Pipeline run requested (save={save})")
    return _serialize(_execute(save=save))


@app.post("/upload")
def upload_file(file: UploadFile = File(...)):
    """Run the pipeline over an uploaded CSV export."""
    if not file.filename or not file.filename.lower().endswith('.csv'):
        raise HTTPException(status_code=400, detail="Only CSV files are supported")

    fd, temp_path = tempfile.mkstemp(suffix='.csv')
    try:
        with os.fdopen(fd, 'wb') as f:
            f.write(file.file.read())
        logger.info(f"Processing uploaded file: {file.filename}")
        results = _execute(input_file=temp_path)
    finally:
        os.unlink(temp_path)

    response = _serialize(results)
    response['filename'] = file.filename
    return response


def start_server(host: str = "0.0.0.0", port: Optional[int] = None, reload: bool = False):
    """Start the API server."""
    port = port or config.API_PORT
    logger.info(f"Starting Retail Sales Pipeline API server on {host}:{port}")
    uvicorn.run("api_server:app", host=host, port=port, reload=reload)


if __name__ == "__main__":
    start_server()
