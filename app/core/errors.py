"""Erreurs métier du service de tâches"""


class TaskStoreError(Exception):
    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(TaskStoreError):
    """Entrée invalide ou incomplète (erreur appelant)"""
    status_code = 400


class NotFound(TaskStoreError):
    status_code = 404

    def __init__(self, message: str = "not found"):
        super().__init__(message)


class InternalError(TaskStoreError):
    """Panne du stockage, le détail reste dans les logs"""
    status_code = 500

    def __init__(self, message: str = "internal error"):
        super().__init__(message)
