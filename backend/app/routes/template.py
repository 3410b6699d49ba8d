"""
Email template endpoints.

The template travels as one string, subject and body joined by
"\n---\n". Without the separator the whole string is the body and the
subject is empty.
"""
from fastapi import APIRouter, Depends

from app.models.template import EmailTemplate, TemplateRequest, TemplateResponse
from app.services.session_service import SessionContext, get_current_session
from app.services.template_service import (
    find_template_variables,
    find_variables,
    unknown_variables,
)

router = APIRouter()


def _template_response(session: SessionContext) -> TemplateResponse:
    template = session.template
    unknown = None
    if session.sheet is not None:
        unknown = unknown_variables(template, session.sheet.headers)
    return TemplateResponse(
        template=template.combined,
        subject=template.subject,
        body=template.body,
        variables=find_template_variables(template),
        unknown_variables=unknown,
    )


@router.get("/template", response_model=TemplateResponse, response_model_exclude_none=True)
async def get_template(session: SessionContext = Depends(get_current_session)):
    """Current template for the signed-in user."""
    return _template_response(session)


@router.put("/template", response_model=TemplateResponse, response_model_exclude_none=True)
async def put_template(
    request: TemplateRequest,
    session: SessionContext = Depends(get_current_session),
):
    """Replace the template. Variables without a matching column are reported."""
    session.template = EmailTemplate.from_combined(request.template)
    return _template_response(session)


@router.post("/template/variables")
async def template_variables(request: TemplateRequest):
    """Placeholder names used in a template, in order of first use."""
    return {"variables": find_variables(request.template)}
