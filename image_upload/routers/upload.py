from functools import lru_cache

from fastapi import APIRouter, Depends, HTTPException

from image_upload.agents.orchestrator import UploadOrchestrator, skill_manifest
from image_upload.errors import (
    AuthenticationUnavailable,
    IdentityCheckFailed,
    MissingParameter,
    UploadFailed,
)
from image_upload.schemas import SkillManifest, UploadRequest, UploadResult

router = APIRouter()


@lru_cache
def get_orchestrator() -> UploadOrchestrator:
    return UploadOrchestrator()


@router.get("/skill", response_model=SkillManifest)
async def describe_skill():
    return skill_manifest()


@router.post("/upload", response_model=UploadResult)
def upload(req: UploadRequest, orchestrator: UploadOrchestrator = Depends(get_orchestrator)):
    try:
        return orchestrator.run(req)
    except MissingParameter as exc:
        raise HTTPException(status_code=400, detail=str(exc))
    except (AuthenticationUnavailable, IdentityCheckFailed) as exc:
        raise HTTPException(status_code=401, detail=str(exc))
    except UploadFailed as exc:
        raise HTTPException(status_code=502, detail=exc.detail)
