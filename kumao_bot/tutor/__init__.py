"""Kumao-sensei tutor: model access and message handling."""

from kumao_bot.tutor.handler import TutorHandler, board_url
from kumao_bot.tutor.llm import TutorClient, image_data_url, sniff_image_mime

__all__ = ["TutorClient", "TutorHandler", "board_url", "image_data_url", "sniff_image_mime"]
