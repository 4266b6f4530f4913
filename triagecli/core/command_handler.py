"""Command Handler: Orchestrates CLI command execution.

Receives commands from the main entry point (main.py), delegates the work to
the AssessmentService and reports results or the fatal error through the UI.
"""

import logging

from triagecli.core.services.assessment_service import AssessmentService
from triagecli.domain.interfaces.user_interface import UserInterface
from triagecli.domain.models.errors import error_payload

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_FATAL = 1


class CommandHandler:
    """Handles incoming commands and delegates to appropriate services."""

    def __init__(self, assessment_service: AssessmentService, ui: UserInterface):
        self.assessment_service = assessment_service
        self.ui = ui

    async def handle_assess(self, dry_run: bool = False) -> int:
        """Handles the 'assess' command.

        Shows the alert lists before submitting so they are visible even when
        the submission itself fails.

        Returns:
            The process exit code.
        """
        logger.info(f"Handling 'assess' command (dry_run={dry_run})")
        try:
            report = await self.assessment_service.classify()
            self.ui.display_alert_summary(report.alerts)
            if dry_run:
                self.ui.display_warning("Dry run: assessment was not submitted.")
                return EXIT_OK
            await self.assessment_service.submit(report)
        except Exception as e:
            logger.error(f"Fatal: {e}", exc_info=True)
            self.ui.display_error(f"Fatal: {e}", payload=error_payload(e))
            return EXIT_FATAL
        finally:
            await self.assessment_service.aclose()

        self.ui.display_submission_response(report.response)
        self.ui.display_info("Assessment submitted")
        return EXIT_OK
