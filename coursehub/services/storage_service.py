# coursehub/services/storage_service.py
"""
Almacén de objetos para los archivos de video.

Backend de sistema de archivos: cada objeto vive en
STORAGE_ROOT/<bucket>/<path> y se publica en
STORAGE_PUBLIC_BASE_URL/<bucket>/<path>.
"""
import logging
import os
from typing import Optional

from coursehub.core.config import settings
from coursehub.core.exceptions import ConflictError, NotFoundError, StoreError, ValidationError
from coursehub.utils.formatting import sanitize_filename, sanitize_folder_name

logger = logging.getLogger("coursehub.storage")


def build_video_path(user_email: str, video_id: str, filename: str) -> str:
    """'{email saneado}/{video_id}_{nombre saneado}'"""
    return f"{sanitize_folder_name(user_email)}/{video_id}_{sanitize_filename(filename)}"


class StorageService:

    def __init__(self, root: Optional[str] = None, bucket: Optional[str] = None,
                 public_base_url: Optional[str] = None):
        self.root = root or settings.STORAGE_ROOT
        self.bucket = bucket or settings.STORAGE_BUCKET
        self.public_base_url = (public_base_url or settings.STORAGE_PUBLIC_BASE_URL).rstrip("/")

    @property
    def bucket_dir(self) -> str:
        return os.path.join(self.root, self.bucket)

    def _full_path(self, path: str) -> str:
        bucket_dir = os.path.abspath(self.bucket_dir)
        full_path = os.path.abspath(os.path.join(bucket_dir, path))
        if not full_path.startswith(bucket_dir + os.sep):
            raise ValidationError(f"Ruta de almacenamiento inválida: {path}")
        return full_path

    def exists(self, path: str) -> bool:
        return os.path.isfile(self._full_path(path))

    def upload(self, path: str, data: bytes) -> str:
        """
        Guarda el objeto sin sobrescribir. Devuelve la ruta.

        Raises:
            ConflictError: ya existe un objeto en esa ruta
            StoreError: falló la escritura
        """
        full_path = self._full_path(path)
        try:
            os.makedirs(os.path.dirname(full_path), exist_ok=True)
            with open(full_path, "xb") as handle:
                handle.write(data)
        except FileExistsError:
            raise ConflictError(f"Ya existe un archivo en {path}")
        except OSError as e:
            logger.error(f"Error subiendo {path}: {e}")
            raise StoreError(f"No se pudo guardar el archivo: {e}")

        logger.info(f"Archivo guardado: {self.bucket}/{path} ({len(data)} bytes)")
        return path

    def get_public_url(self, path: str) -> str:
        return f"{self.public_base_url}/{self.bucket}/{path}"

    def path_from_public_url(self, url: str) -> Optional[str]:
        """Ruta dentro del bucket para una URL pública, o None si no es nuestra."""
        prefix = f"{self.public_base_url}/{self.bucket}/"
        if not url or not url.startswith(prefix):
            return None
        return url[len(prefix):]

    def read(self, path: str) -> bytes:
        full_path = self._full_path(path)
        if not os.path.isfile(full_path):
            raise NotFoundError(f"Archivo no encontrado: {path}")
        try:
            with open(full_path, "rb") as handle:
                return handle.read()
        except OSError as e:
            raise StoreError(f"No se pudo leer el archivo: {e}")

    def remove(self, path: str) -> bool:
        """Elimina el objeto. Devuelve False si no existía."""
        full_path = self._full_path(path)
        try:
            os.remove(full_path)
        except FileNotFoundError:
            return False
        except OSError as e:
            logger.error(f"Error eliminando {path}: {e}")
            raise StoreError(f"No se pudo eliminar el archivo: {e}")
        logger.info(f"Archivo eliminado: {self.bucket}/{path}")
        return True


def get_storage() -> StorageService:
    return StorageService()
