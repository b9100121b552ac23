from __future__ import annotations

import base64
import io
import logging

from PIL import Image, UnidentifiedImageError

from streakify.config import Config
from streakify.utils.errors import APIError


logger = logging.getLogger(__name__)

MAX_WIDTH = 800
JPEG_QUALITY = 60


class ImageService:
	"""Shrinks proof photos into JPEG data URLs small enough to live in a log document."""

	def __init__(self, max_width: int = MAX_WIDTH, quality: int = JPEG_QUALITY):
		self.max_width = max_width
		self.quality = quality

	def to_data_url(self, raw: bytes) -> str:
		try:
			image = Image.open(io.BytesIO(raw))
			image.load()
		except (UnidentifiedImageError, OSError) as e:
			raise APIError("File is not a readable image", 400) from e

		if image.mode != "RGB":
			image = image.convert("RGB")
		scale = self.max_width / image.width
		size = (self.max_width, max(1, round(image.height * scale)))
		image = image.resize(size, Image.Resampling.LANCZOS)

		buf = io.BytesIO()
		image.save(buf, format="JPEG", quality=self.quality)
		data_url = "data:image/jpeg;base64," + base64.b64encode(buf.getvalue()).decode("ascii")
		if len(data_url) > Config.MAX_PROOF_BYTES:
			raise APIError("Image is too large even after compression", 413)
		logger.debug("Proof image %dx%d -> %d bytes", size[0], size[1], len(data_url))
		return data_url

	def process_upload(self, file_storage) -> str:
		if file_storage is None or not file_storage.filename:
			raise APIError("No file uploaded", 400)
		return self.to_data_url(file_storage.read())


image_service = ImageService()
