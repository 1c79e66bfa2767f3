"""ASGI entrypoint for the image generation bot."""

from imagegen_bot.api.app import create_app
from imagegen_bot.containers import build_container

app = create_app(build_container())
