from __future__ import annotations

from pathlib import Path

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from loguru import logger
from mangum import Mangum

from .config import Settings, configure_logging, load_dotenv_file, load_settings
from .domain import ClassRanking, GameStatistics, LiveStandings, MatrixCell, ResultDetail, Snapshot
from .errors import GroupNotFoundError, SnapshotUnavailableError, ValidationError
from .evaluation import compute_class_ranking, compute_completion_matrix, compute_result_details
from .standings import compose_live_standings
from .statistics import compute_game_statistics
from .store import SnapshotProvider, build_provider


def create_app(provider: SnapshotProvider | None = None, settings: Settings | None = None) -> FastAPI:
    if settings is None:
        repo_root = Path(__file__).resolve().parents[3]
        load_dotenv_file(repo_root)
        settings = load_settings()
    configure_logging(settings.log_level)

    if provider is None:
        provider = build_provider(settings)

    app = FastAPI(title="Festival Scoring")

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=False,
        allow_methods=["GET"],
        allow_headers=["*"],
    )

    def invalid(e: ValidationError) -> HTTPException:
        logger.warning(f"rejected snapshot data: {e}")
        detail = {
            "message": str(e),
            "result_id": e.result_id,
            "child_id": e.child_id,
            "result_ids": list(e.result_ids),
        }
        return HTTPException(status_code=422, detail=detail)

    def snapshot() -> Snapshot:
        # Each view loads its own snapshot; a failed load only affects that view.
        try:
            return provider.load_snapshot()
        except SnapshotUnavailableError as e:
            logger.error(f"snapshot unavailable: {e}")
            raise HTTPException(status_code=503, detail="snapshot unavailable")
        except ValidationError as e:
            raise invalid(e)

    @app.get("/health")
    def health():
        return {"ok": True}

    @app.get("/api/classes")
    def classes() -> list[str]:
        return snapshot().class_labels()

    @app.get("/api/classes/{class_label}/ranking", response_model=ClassRanking)
    def class_ranking(class_label: str):
        snap = snapshot()
        if class_label not in snap.class_labels():
            raise HTTPException(status_code=404, detail="class not found")
        try:
            return compute_class_ranking(
                snap, class_label, settings.duplicate_policy, settings.aggregation_mode
            )
        except ValidationError as e:
            raise invalid(e)

    @app.get("/api/groups/{group_id}/standings", response_model=LiveStandings)
    def live_standings(group_id: str):
        try:
            return compose_live_standings(
                snapshot(), group_id, settings.duplicate_policy, settings.aggregation_mode
            )
        except GroupNotFoundError:
            raise HTTPException(status_code=404, detail="group not found")
        except ValidationError as e:
            raise invalid(e)

    @app.get("/api/groups/{group_id}/details", response_model=list[ResultDetail])
    def result_details(group_id: str, game_id: str | None = None):
        try:
            return compute_result_details(snapshot(), group_id, game_id, settings.duplicate_policy)
        except GroupNotFoundError:
            raise HTTPException(status_code=404, detail="group not found")
        except ValidationError as e:
            raise invalid(e)

    @app.get("/api/completion-matrix", response_model=list[MatrixCell])
    def completion_matrix():
        return compute_completion_matrix(snapshot())

    @app.get("/api/statistics", response_model=list[GameStatistics])
    def statistics():
        return compute_game_statistics(snapshot())

    return app


app = create_app()
handler = Mangum(app)
