from abc import ABCMeta, abstractmethod
from typing import Any

from vlbistats.images.image import Image


class ImageProcessor(metaclass=ABCMeta):
    def __init__(self, **kwargs: Any):
        """Init new image processor."""
        if kwargs:
            raise TypeError(f"Unexpected arguments for {self.__class__.__name__}: {', '.join(kwargs)}")

    @abstractmethod
    def __call__(self, image: Image) -> Image:
        """Processes an image.

        Processors never modify the given image, but always return a new one.

        Args:
            image: Image to process.

        Returns:
            Processed image.
        """
        ...


__all__ = ["ImageProcessor"]
