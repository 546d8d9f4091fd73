"""kumao-bot: LINE webhook tutor answering math and science questions."""

__version__ = "0.1.0"
