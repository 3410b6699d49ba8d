"""
Template-related Pydantic models.
"""
from pydantic import BaseModel, ConfigDict, Field
from typing import List, Optional


# Subject and body are persisted as one string joined by this separator
TEMPLATE_SEPARATOR = "\n---\n"


class EmailTemplate(BaseModel):
    """Subject and body patterns containing {name} placeholders."""
    subject: str = ""
    body: str = ""

    @classmethod
    def from_combined(cls, combined: str) -> "EmailTemplate":
        """Build from the stored 'subject\\n---\\nbody' form."""
        if TEMPLATE_SEPARATOR not in combined:
            return cls(subject="", body=combined)
        subject, body = combined.split(TEMPLATE_SEPARATOR, 1)
        return cls(subject=subject, body=body)

    @property
    def combined(self) -> str:
        return f"{self.subject}{TEMPLATE_SEPARATOR}{self.body}"

    @property
    def is_complete(self) -> bool:
        return bool(self.subject.strip()) and bool(self.body.strip())


class TemplateRequest(BaseModel):
    """Combined template string from frontend."""
    template: str = ""


class TemplateResponse(BaseModel):
    """Template as stored in the session."""
    model_config = ConfigDict(populate_by_name=True)

    template: str
    subject: str
    body: str
    variables: List[str]
    unknown_variables: Optional[List[str]] = Field(default=None, alias="unknownVariables")
