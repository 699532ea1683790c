"""Poem and sketch generation endpoints."""
import logging
from typing import Callable, Optional, Tuple

from fastapi import APIRouter, BackgroundTasks, Depends, Query, Request
from fastapi.concurrency import run_in_threadpool
from sqlalchemy.orm import Session
from starlette.datastructures import UploadFile

from src.api.deps import (
    get_auth_context,
    get_db,
    get_mutation_guard,
    get_poetry_service,
    get_session_factory,
    get_storage,
    get_token_auth,
)
from src.app.config import settings
from src.app.exceptions import UpstreamError, ValidationError
from src.core.auth import AuthContext, TokenAuth
from src.schemas.poem import GeneratedPoemResponse, SketchRequest, SketchResponse
from src.services.generation import PoetryService, load_generation_settings, save_generated_poem
from src.services.ownership import OwnedMutationGuard
from src.services.storage.s3 import S3Service, S3ServiceError
from src.utils.validators import ImageValidationError, validate_image

logger = logging.getLogger(__name__)

router = APIRouter()


async def read_image(request: Request) -> Tuple[bytes, str]:
    """
    Image from a multipart ``image`` field or from the raw request body.

    Raises:
        ValidationError: Missing, empty, oversized or unsupported image
    """
    content_type = request.headers.get('content-type', '')

    if content_type.startswith('multipart/form-data'):
        form = await request.form()
        upload = form.get('image')
        if not isinstance(upload, UploadFile):
            raise ValidationError('No image file provided')
        contents = await upload.read()
        mime_type = upload.content_type
    else:
        contents = await request.body()
        mime_type = content_type or None

    try:
        return validate_image(contents, mime_type, settings.MAX_IMAGE_BYTES)
    except ImageValidationError as e:
        raise ValidationError(str(e))


@router.post('/generate-poem', response_model=GeneratedPoemResponse)
async def generate_poem(
    request: Request,
    background_tasks: BackgroundTasks,
    poem_type: Optional[str] = Query(None, alias='type', description='dirty-limerick, dirty-haiku or omitted'),
    auth: AuthContext = Depends(get_auth_context),
    db: Session = Depends(get_db),
    poetry: PoetryService = Depends(get_poetry_service),
    session_factory: Callable[[], Session] = Depends(get_session_factory),
):
    """
    Generate a poem for a photo.

    Accepts a verified token or a ``userid`` parameter. The generated poem
    is returned immediately and stored for the caller in the background.
    """
    image, mime_type = await read_image(request)
    logger.info(f"Generating poem for {auth.subject_id} via {auth.tier.value} auth")

    user = await run_in_threadpool(load_generation_settings, db, auth.subject_id)
    result = await run_in_threadpool(poetry.generate_poem, user, image, mime_type, poem_type)

    background_tasks.add_task(save_generated_poem, session_factory, auth.subject_id, result, user.pen_name)
    return result


@router.post('/generate-sketch', response_model=SketchResponse)
def generate_sketch(
    payload: SketchRequest,
    auth: TokenAuth = Depends(get_token_auth),
    db: Session = Depends(get_db),
    guard: OwnedMutationGuard = Depends(get_mutation_guard),
    poetry: PoetryService = Depends(get_poetry_service),
    storage: S3Service = Depends(get_storage),
):
    """Draw a sketch for one of the caller's poems and attach its URL."""
    if not payload.id or not payload.title or not payload.poem:
        raise ValidationError('Missing id, title, or poem')

    poem = guard.load_owned(payload.id, auth.subject_id)

    user = load_generation_settings(db, auth.subject_id)
    sketch = poetry.generate_sketch(
        user,
        payload.title,
        payload.poem,
    )

    try:
        url = storage.upload_file(
            sketch,
            S3Service.sketch_key(poem.id),
            content_type='image/png',
            metadata={'owner_id': auth.subject_id},
        )
    except S3ServiceError as e:
        raise UpstreamError(f"Sketch upload failed: {e}") from e

    guard.set_derived_asset(poem.id, auth.subject_id, url)
    return SketchResponse(sketch_url=url)
