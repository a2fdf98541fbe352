"""
FastAPI server for Motor Screen.

Exposes the scoring engine and the result store over REST.
"""

import logging
from typing import Dict, List, Optional

import uvicorn
from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware

from recommendation import TemplateRecommendationProvider, attach_recommendation
from scoring import TEST_TYPES, analyze_tremor_trend, score_test
from scoring.errors import InvalidInputError, RecommendationUnavailable
from utils.config_loader import get_nested_config, load_config
from utils.result_store import ResultStore

logger = logging.getLogger(__name__)


def create_app(config: Optional[Dict] = None, store: Optional[ResultStore] = None) -> FastAPI:
    """
    Build the API application.

    Args:
        config: Configuration dict (defaults.yaml when None)
        store: Result store (opened from storage.db_path when None)

    Returns:
        FastAPI app
    """
    config = config if config is not None else load_config()
    store = store or ResultStore(get_nested_config(config, 'storage.db_path', 'data/results/motor_screen.db'))
    provider = TemplateRecommendationProvider.from_config(config)
    default_duration = get_nested_config(config, 'tapping.default_duration_sec', 10)

    app = FastAPI(
        title="Motor Screen API",
        description="REST API for motor and vocal biomarker scoring",
        version="1.0.0"
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=get_nested_config(config, 'api.cors_origins', []),
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.get("/")
    def root():
        """API root endpoint."""
        return {
            "message": "Motor Screen API",
            "version": "1.0.0",
            "test_types": list(TEST_TYPES),
            "endpoints": [
                "/score/{test_type}",
                "/tremor/analyze",
                "/users/{user_id}/results",
                "/users/{user_id}/statistics",
                "/users/{user_id}/progress",
                "/results/{result_id}"
            ]
        }

    @app.post("/score/{test_type}")
    def score(test_type: str, payload: dict, user_id: Optional[str] = None) -> Dict:
        """
        Score a raw capture payload.

        Args:
            test_type: spiral, tapping, reaction or voice
            payload: Raw capture data
            user_id: When given, the result is stored for this user

        Returns:
            Result record (plus result_id when stored)
        """
        try:
            result = score_test(test_type, payload, default_duration=default_duration)
        except InvalidInputError as e:
            raise HTTPException(status_code=422, detail=str(e))

        response: Dict = {}
        try:
            result = attach_recommendation(result, provider)
        except RecommendationUnavailable as e:
            response['recommendation_error'] = str(e)

        response.update(result.to_dict())

        if user_id:
            try:
                response['result_id'] = store.save_result(user_id, result, raw_data=payload)
            except Exception as e:
                logger.error(f"Failed to store {test_type} result: {e}")
                raise HTTPException(status_code=500, detail=str(e))

        return response

    @app.post("/tremor/analyze")
    def analyze_tremor(payload: dict) -> Dict:
        """Assess severity and stability of wearable tremor readings."""
        try:
            result = analyze_tremor_trend(payload.get('readings'))
        except InvalidInputError as e:
            raise HTTPException(status_code=422, detail=str(e))
        return result.to_dict()

    @app.get("/users/{user_id}/results")
    def list_results(
        user_id: str,
        test_type: Optional[str] = None,
        limit: int = 100,
        offset: int = 0
    ) -> List[Dict]:
        """List a user's stored results, newest first."""
        try:
            return store.list_results(user_id, test_type=test_type, limit=limit, offset=offset)
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    @app.get("/users/{user_id}/statistics")
    def statistics(user_id: str) -> Dict:
        """Dashboard summary for a user."""
        try:
            return store.get_dashboard_stats(user_id)
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    @app.get("/users/{user_id}/progress")
    def progress(user_id: str, days: int = 30) -> Dict:
        """Daily averages and trend over the last `days` days."""
        try:
            return store.get_progress(user_id, days=days)
        except ValueError as e:
            raise HTTPException(status_code=422, detail=str(e))

    @app.get("/results/{result_id}")
    def get_result(result_id: str, user_id: Optional[str] = None) -> Dict:
        """Get a single stored result."""
        record = store.get_result(result_id, user_id=user_id)
        if not record:
            raise HTTPException(status_code=404, detail=f"Result {result_id} not found")
        return record

    return app


def start_server(host: str = "127.0.0.1", port: int = 8000, config: Optional[Dict] = None):
    """
    Start the API server.

    Args:
        host: Host address
        port: Port number
        config: Configuration dict
    """
    app = create_app(config)
    logger.info(f"Starting Motor Screen API server at http://{host}:{port}")
    logger.info(f"API documentation available at http://{host}:{port}/docs")
    uvicorn.run(app, host=host, port=port)


if __name__ == "__main__":
    start_server()
