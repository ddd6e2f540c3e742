# coursehub/core/exceptions.py
"""
Taxonomía de errores de dominio.

Los servicios lanzan estas excepciones; la capa HTTP las traduce a códigos de
estado en coursehub/main.py. Ningún servicio lanza HTTPException.
"""


class CourseHubError(Exception):
    """Excepción base de la aplicación"""
    status_code = 400

    def __init__(self, message: str = ""):
        super().__init__(message)
        self.message = message or self.__class__.__name__


class ValidationError(CourseHubError):
    """Entrada fuera de rango: longitud de texto, valor de calificación, etc."""
    status_code = 400


class EligibilityError(CourseHubError):
    """El usuario no cumple la regla de negocio (no inscrito, no es dueño, ya reseñó)"""
    status_code = 403


class MissingRatingError(EligibilityError):
    """La reseña requiere una calificación previa del usuario"""
    pass


class ConflictError(CourseHubError):
    """Escritura duplicada sobre una llave única"""
    status_code = 409


class NotFoundError(CourseHubError):
    """El curso, video o registro referenciado no existe"""
    status_code = 404


class StoreError(CourseHubError):
    """Falló la llamada al almacén de datos u objetos"""
    status_code = 503


class AuthenticationRequiredError(CourseHubError):
    """La operación requiere un contexto de sesión autenticado"""
    status_code = 401
