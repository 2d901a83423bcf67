from typing import Optional

from supabase import Client, create_client

from spareflow.core.settings import settings

from .exceptions import LabelStorageError


class LabelStorage:
    """
    Supabase storage service for shipping label PDFs.
    Files live in the labels bucket under ``shipments/<shipment id>/``.
    """

    def __init__(self, bucket_name: Optional[str] = None) -> None:
        if not settings.SUPABASE_URL or not settings.SUPABASE_SERVICE_ROLE_KEY:
            raise ValueError("Supabase configuration is required for label storage")

        self.client: Client = create_client(
            settings.SUPABASE_URL, settings.SUPABASE_SERVICE_ROLE_KEY
        )
        self.bucket_name = bucket_name or settings.LABELS_BUCKET

    @staticmethod
    def label_path(shipment_id: str, box_number: int) -> str:
        return f"shipments/{shipment_id}/box-{box_number}.pdf"

    async def upload_label(
        self, file_content: bytes, shipment_id: str, box_number: int
    ) -> str:
        """
        Upload a box label, replacing any earlier label for the same box.

        Args:
            file_content: The PDF content as bytes
            shipment_id: Shipment the box belongs to
            box_number: Box number within the shipment

        Returns:
            The storage path of the uploaded file

        Raises:
            LabelStorageError: If upload fails
        """
        storage_path = self.label_path(shipment_id, box_number)
        try:
            self.client.storage.from_(self.bucket_name).upload(
                path=storage_path,
                file=file_content,
                file_options={
                    "content-type": "application/pdf",
                    "cache-control": "3600",
                    "upsert": "true",  # Regenerated labels replace old ones
                },
            )
        except Exception as e:
            raise LabelStorageError(f"Failed to upload label: {e}") from e
        return storage_path

    async def download_label(self, storage_path: str) -> bytes:
        """
        Download a label PDF.

        Raises:
            LabelStorageError: If download fails
        """
        try:
            result = self.client.storage.from_(self.bucket_name).download(storage_path)
        except Exception as e:
            raise LabelStorageError(f"Failed to download label: {e}") from e
        return bytes(result)


def get_label_storage() -> Optional[LabelStorage]:
    """Label storage when Supabase is configured, otherwise None."""
    if settings.SUPABASE_URL and settings.SUPABASE_SERVICE_ROLE_KEY:
        return LabelStorage()
    return None
