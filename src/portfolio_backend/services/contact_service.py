"""Contact form service.

Persists the message, then hands the notification and auto-reply emails to
the job queue so the HTTP response never waits for SMTP.
"""

import logging
import math
from dataclasses import dataclass
from html import escape

from portfolio_backend.entities import ContactMessageEntity, EmailJob
from portfolio_backend.protocols import ContactStore, JobQueue, Mailer

logger = logging.getLogger(__name__)

EMAIL_JOB = "email"


@dataclass(frozen=True)
class ContactPage:
    """One page of the admin inbox."""

    messages: list[ContactMessageEntity]
    total: int
    page: int
    total_pages: int


class ContactService:
    """Stores contact messages and queues their emails.

    Example:
        ```python
        contact = ContactService(repository=repo, queue=queue, mailer=mailer,
                                 owner_email="me@example.com")
        contact.register_jobs()
        await contact.submit(ContactMessageEntity(...))
        ```
    """

    def __init__(
        self,
        repository: ContactStore,
        queue: JobQueue,
        mailer: Mailer,
        owner_email: str | None = None,
        owner_name: str = "Portfolio",
    ) -> None:
        """Initialize the contact service.

        Args:
            repository: Contact message persistence.
            queue: Job queue that delivers the emails.
            mailer: Backend used by the ``email`` job handler.
            owner_email: Address notified of new messages; None skips the notification.
            owner_name: Name used to sign the auto-reply.
        """
        self._repository = repository
        self._queue = queue
        self._mailer = mailer
        self._owner_email = owner_email
        self._owner_name = owner_name

    def register_jobs(self) -> None:
        """Attach the ``email`` job handler to the queue."""
        self._queue.register(EMAIL_JOB, self.deliver_email)

    async def deliver_email(self, payload: dict) -> None:
        await self._mailer.send(EmailJob.from_payload(payload))

    async def submit(self, message: ContactMessageEntity) -> ContactMessageEntity:
        """Persist a contact message and queue its emails.

        Returns:
            The stored message, with its id

        Raises:
            PersistenceError: If the message cannot be stored
        """
        stored = await self._repository.add(message)
        logger.info("Contact message received from %s", message.email)

        for job in self.build_emails(message):
            await self._queue.enqueue(EMAIL_JOB, job.to_payload())
        return stored

    async def list_messages(self, page: int = 1, limit: int = 20, read: bool | None = None) -> ContactPage:
        """Return one page of the inbox, newest first.

        Pages are 1-based; a page past the end is empty.
        """
        if page < 1 or limit < 1:
            raise ValueError(f"page and limit must be >= 1, got page={page} limit={limit}")
        total = await self._repository.count(read)
        messages = await self._repository.list_messages(read, limit=limit, offset=(page - 1) * limit)
        return ContactPage(
            messages=messages,
            total=total,
            page=page,
            total_pages=math.ceil(total / limit),
        )

    async def mark_read(self, message_id: int) -> ContactMessageEntity | None:
        message = await self._repository.mark_read(message_id)
        if message is not None:
            logger.info("Contact message %d marked as read", message_id)
        return message

    def build_emails(self, message: ContactMessageEntity) -> list[EmailJob]:
        """Build the owner notification (if configured) and the sender auto-reply.

        User-supplied text is HTML-escaped.
        """
        name = escape(message.name)
        email = escape(message.email)
        subject = escape(message.subject)
        body = escape(message.message)

        jobs = []
        if self._owner_email:
            jobs.append(
                EmailJob(
                    to=self._owner_email,
                    subject=f"New Contact Form: {message.subject}",
                    html=(
                        "<h3>New Contact Message</h3>"
                        f"<p><strong>Name:</strong> {name}</p>"
                        f"<p><strong>Email:</strong> {email}</p>"
                        f"<p><strong>Subject:</strong> {subject}</p>"
                        "<p><strong>Message:</strong></p>"
                        f"<p>{body}</p>"
                    ),
                )
            )
        jobs.append(
            EmailJob(
                to=message.email,
                subject=f"Thank you for contacting {self._owner_name}",
                html=(
                    "<h3>Thank you for reaching out!</h3>"
                    f"<p>Dear {name},</p>"
                    "<p>Thank you for contacting me. I have received your message "
                    "and will get back to you as soon as possible.</p>"
                    f"<p>Best regards,<br>{escape(self._owner_name)}</p>"
                ),
            )
        )
        return jobs
