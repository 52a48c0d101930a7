"""
Service responses for collaborators outside the core.

Errors raised by the services are turned into explicit failure responses
here and are never retried.
"""

import logging
from typing import Any, Awaitable, Callable, Optional, TypeVar

from pydantic import BaseModel

from ..core.exceptions import ConduitError, NotFoundError, PayloadValidationError
from ..core.models import ServiceResponse

logger = logging.getLogger(__name__)

T = TypeVar("T")


def status_code_for(error: BaseException) -> int:
    if isinstance(error, NotFoundError):
        return 404
    if isinstance(error, PayloadValidationError):
        return 400
    return 500


def error_response(error: BaseException) -> ServiceResponse:
    """Build the failure response for an error."""
    kind = error.kind if isinstance(error, ConduitError) else None
    message = error.message if isinstance(error, ConduitError) else str(error) or "Unknown error"
    return ServiceResponse(
        success=False,
        error=message,
        error_kind=kind,
        status_code=status_code_for(error),
    )


def success_response(data: Optional[Any] = None) -> ServiceResponse:
    if isinstance(data, BaseModel):
        data = data.model_dump(mode="json")
    return ServiceResponse(success=True, data=data)


async def respond(operation: Callable[[], Awaitable[T]]) -> ServiceResponse:
    """Run a service call and wrap its result or error in a ServiceResponse.

    Usage:
        response = await respond(lambda: job_service.get_job(job_id))
    """
    try:
        result = await operation()
    except ConduitError as e:
        if status_code_for(e) == 500:
            logger.error(f"Service call failed: {e}")
        return error_response(e)
    except Exception as e:
        logger.error(f"Unexpected error in service call: {e}", exc_info=True)
        return error_response(e)
    return success_response(result)
