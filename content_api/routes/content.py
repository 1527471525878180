"""
Content block routes for the CMS portion of the site
"""
import logging
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, Query, Request, status

from content_api.core.config import settings
from content_api.schemas.content import DeleteResponse, ErrorResponse, UpdateResponse
from content_api.services.content_provider import ContentProvider, get_content_provider
from content_api.utils.query_utils import (
    MalformedQueryError,
    clean_query,
    error_response,
    is_script_injection,
    try_parse_json,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/content", tags=["content"])

NO_RECORDS_FOUND = "No records found."
SCRIPT_TAGS_NOT_ALLOWED = "Script tags are not allowed."

_ERROR_RESPONSES = {status.HTTP_500_INTERNAL_SERVER_ERROR: {"model": ErrorResponse}}


def _scripts_allowed(request: Request) -> bool:
    """True when the request opted out of the script tag check (?script=1)"""
    return request.query_params.get(settings.SCRIPT_OVERRIDE_PARAM) == "1"


@router.get(
    "/find",
    response_model=List[Dict[str, Any]],
    responses={status.HTTP_404_NOT_FOUND: {"model": ErrorResponse}, **_ERROR_RESPONSES},
    summary="Find content blocks",
    description="Find all content blocks matching a JSON query, e.g. content/find?q={\"@subject\":\"/home/\"}"
)
async def find_content(
    q: str = Query("{}", description="JSON query; one field may hold a /regex/"),
    provider: ContentProvider = Depends(get_content_provider)
):
    """
    Find content blocks

    - **q**: JSON object to match against. A value written between slashes
      is matched as a case-insensitive regular expression.
    """
    try:
        query = clean_query(q)
        items = await provider.find(query)
    except MalformedQueryError as e:
        logger.warning(f"Rejected content query: {e}")
        return error_response(str(e))
    except Exception as e:
        logger.error(f"Error finding content blocks: {e}", exc_info=True)
        return error_response(str(e))

    if not items:
        return error_response(NO_RECORDS_FOUND, status.HTTP_404_NOT_FOUND)

    return items


@router.get(
    "/{item_id}",
    response_model=Optional[Dict[str, Any]],
    responses=_ERROR_RESPONSES,
    summary="Get content block by ID",
    description="Retrieve a single content block by its identifier; null when nothing has that id"
)
async def get_content(item_id: str, provider: ContentProvider = Depends(get_content_provider)):
    """
    Get a single content block

    - **item_id**: The content block's `_id`
    """
    try:
        item = await provider.find_one(item_id)
    except Exception as e:
        logger.error(f"Error getting content block {item_id}: {e}", exc_info=True)
        return error_response(str(e))

    return item


@router.post(
    "",
    response_model=Dict[str, Any],
    responses=_ERROR_RESPONSES,
    summary="Create a content block",
    description="Store the posted JSON object as a new content block. Script tags are refused unless ?script=1"
)
async def create_content(request: Request, provider: ContentProvider = Depends(get_content_provider)):
    """
    Create a content block

    The request body is any JSON object. An `_id` field, when present, is
    used as the identifier; otherwise one is generated.
    """
    try:
        data = try_parse_json(await request.body())

        if is_script_injection(data, allow_scripts=_scripts_allowed(request)):
            logger.warning("Refused content block containing a script tag")
            return error_response(SCRIPT_TAGS_NOT_ALLOWED)

        return await provider.save(data)
    except MalformedQueryError as e:
        logger.warning(f"Rejected content body: {e}")
        return error_response(str(e))
    except Exception as e:
        logger.error(f"Error creating content block: {e}", exc_info=True)
        return error_response(str(e))


@router.put(
    "/{item_id}",
    response_model=UpdateResponse,
    responses=_ERROR_RESPONSES,
    summary="Update a content block",
    description="Merge the posted JSON object into a content block. Script tags are refused unless ?script=1"
)
async def update_content(
    item_id: str,
    request: Request,
    provider: ContentProvider = Depends(get_content_provider)
):
    """
    Update a content block

    - **item_id**: The content block's `_id`
    """
    try:
        data = try_parse_json(await request.body())

        if is_script_injection(data, allow_scripts=_scripts_allowed(request)):
            logger.warning(f"Refused update of content block {item_id} containing a script tag")
            return error_response(SCRIPT_TAGS_NOT_ALLOWED)

        document, count = await provider.update(item_id, data)
        return UpdateResponse(document=document, updated=count)
    except MalformedQueryError as e:
        logger.warning(f"Rejected content body: {e}")
        return error_response(str(e))
    except Exception as e:
        logger.error(f"Error updating content block {item_id}: {e}", exc_info=True)
        return error_response(str(e))


@router.delete(
    "/{item_id}",
    response_model=DeleteResponse,
    responses=_ERROR_RESPONSES,
    summary="Delete a content block",
    description="Delete a content block; `deleted` is 0 when nothing had that id"
)
async def delete_content(item_id: str, provider: ContentProvider = Depends(get_content_provider)):
    """
    Delete a content block

    - **item_id**: The content block's `_id`
    """
    try:
        deleted_id, count = await provider.delete(item_id)
        return DeleteResponse(id=str(deleted_id), deleted=count)
    except Exception as e:
        logger.error(f"Error deleting content block {item_id}: {e}", exc_info=True)
        return error_response(str(e))
