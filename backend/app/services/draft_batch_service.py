"""
Draft batch service - one Gmail draft per sheet row.

Flow:
1. Validate: template complete, sheet loaded, signed in, email column present
2. Run: for each row in order, render subject/body and create a draft;
   rows with an empty email are skipped
3. Complete: report counts and clear the sheet the batch ran over

The access token is checked again before every draft, so signing out
mid-batch aborts the remaining rows.

Drafts are created strictly one at a time. The first Gmail failure
aborts the batch; later rows are not attempted and nothing is retried.
"""
from typing import Awaitable, Callable, List, Optional

from app.integrations.gmail_client import GmailClient
from app.models.draft import BatchResult, BatchState, DraftRequest
from app.models.template import EmailTemplate
from app.services.session_service import SessionContext
from app.services.template_service import render_template
from app.utils.logger import get_logger
from app.utils.errors import AppError, DraftCreationError, ValidationError

logger = get_logger(__name__)

DraftCreator = Callable[[DraftRequest], Awaitable[object]]


def find_email_header(headers: List[str]) -> Optional[str]:
    """
    First header whose lowercased name contains 'email'.

    With several candidates (e.g. "email" and "personal_email") the
    earliest in header order wins.
    """
    for header in headers:
        if "email" in header.lower():
            return header
    return None


class DraftBatchRunner:
    """
    Runs one draft batch for a session.

    Usage:
        runner = DraftBatchRunner(session)
        result = await runner.run()

    Pass create_draft to swap the Gmail collaborator (tests, other mail
    providers).
    """

    def __init__(self, session: SessionContext, create_draft: DraftCreator = None):
        self.session = session
        self._create_draft = create_draft
        self.state = BatchState.IDLE
        self.error: Optional[str] = None
        self.result = BatchResult()

    def _set_state(self, state: BatchState, error: str = None) -> None:
        self.state = state
        self.error = error
        self.session.batch_state = state
        self.session.batch_error = error

    def _fail(self, error: AppError) -> AppError:
        self._set_state(BatchState.FAILED, error.message)
        logger.warning(f"Draft batch failed [{error.code}]: {error.message}")
        return error

    def validate(self, template: EmailTemplate) -> str:
        """
        Check batch preconditions before any network call.

        Returns:
            Name of the email column

        Raises:
            ValidationError: Template incomplete, no sheet, no email column
            AuthRequiredError: No live access token
        """
        self._set_state(BatchState.VALIDATING)

        if not template.is_complete:
            raise ValidationError("Please enter an email subject and body")

        sheet = self.session.sheet
        if sheet is None or not sheet.rows:
            raise ValidationError("Please load a sheet first")

        self.session.require_access_token()

        email_header = find_email_header(sheet.headers)
        if email_header is None:
            raise ValidationError("The sheet needs a column containing 'email'")

        return email_header

    def _default_creator(self) -> DraftCreator:
        gmail = GmailClient(self.session.require_access_token())
        return gmail.create_draft

    async def run(self, template: EmailTemplate = None) -> BatchResult:
        """
        Validate, then create one draft per row.

        Args:
            template: Template to use; defaults to the session's template

        Returns:
            BatchResult with created and skipped counts

        Raises:
            ValidationError, AuthRequiredError, DraftCreationError
        """
        if template is None:
            template = self.session.template

        if self.session.batch_lock.locked():
            raise ValidationError("A draft batch is already running")

        async with self.session.batch_lock:
            try:
                email_header = self.validate(template)
            except AppError as e:
                raise self._fail(e)

            create_draft = self._create_draft or self._default_creator()
            sheet = self.session.sheet
            self.result = BatchResult()
            self._set_state(BatchState.RUNNING)
            logger.info(f"Creating drafts for {len(sheet.rows)} rows (email column: {email_header})")

            for index, row in enumerate(sheet.rows, start=1):
                recipient = (row.get(email_header) or "").strip()

                if not recipient:
                    self.result.skipped_count += 1
                    logger.debug(f"Row {index}: no email, skipped")
                    continue

                subject, body = render_template(template, row)

                try:
                    # Signing out mid-batch stops the remaining rows
                    self.session.require_access_token()
                    await create_draft(DraftRequest(to=recipient, subject=subject, body=body))
                except AppError as e:
                    logger.error(f"Row {index}: draft creation failed, abandoning remaining rows")
                    raise self._fail(e)
                except Exception as e:
                    logger.exception(f"Row {index}: unexpected draft creation error")
                    raise self._fail(DraftCreationError(str(e) or "Failed to create email draft")) from e

                self.result.created_count += 1
                logger.debug(f"Row {index}: draft created")

            self._set_state(BatchState.COMPLETED)
            # A sheet loaded while the batch ran is left in place
            if self.session.sheet is sheet:
                self.session.clear_sheet()

            logger.info(
                f"Draft batch complete: {self.result.created_count} created, "
                f"{self.result.skipped_count} skipped"
            )
            return self.result


def summarize(result: BatchResult) -> str:
    """User-facing summary of a finished batch."""
    message = f"{result.created_count} drafts created successfully!"
    if result.skipped_count:
        message += f" {result.skipped_count} rows skipped (no email address)."
    return message
