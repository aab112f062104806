from outpass.services.file.image_store import ImageStore, ImageUpload

__all__ = ["ImageStore", "ImageUpload"]
