import os
import sys
from pathlib import Path

# Ajoute la racine du projet au PYTHONPATH EN PREMIER
sys.path.insert(0, str(Path(__file__).parent.parent))

# Pas de vraie base pendant les tests : l'app démarre en mode mémoire
os.environ.pop("DATABASE_URL", None)
os.environ.pop("NEON_DATABASE_URL", None)

import pytest

from app.main import app
from app.repositories.relational import RelationalRepository
from app.routers.tasks import get_task_service
from app.services.task_service import TaskService
from fakes import FakeClock, make_repository


@pytest.fixture(params=["memory", "relational"])
def repository(request):
    """Chaque test qui l'utilise tourne sur les deux stockages"""
    repo = make_repository(request.param)
    yield repo
    if isinstance(repo, RelationalRepository):
        repo.engine.dispose()


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def service(repository, clock):
    return TaskService(repository, clock=clock)


@pytest.fixture
def client(service):
    """Client de test FastAPI branché sur le service de test"""
    from fastapi.testclient import TestClient

    app.dependency_overrides[get_task_service] = lambda: service
    yield TestClient(app)
    app.dependency_overrides.clear()
