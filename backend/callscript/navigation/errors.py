# /callscript/navigation/errors.py

"""
Errors raised by the navigation session.

Only ``start()`` raises. Every in-session failure (dangling button target,
search miss, going back from the entry step) is a logged no-op.
"""


class ConfigurationError(Exception):
    """A session could not be started from the operator's selection."""

    operator_message = "Erro: não foi possível iniciar o atendimento. Entre em contato com o administrador."

    def __init__(self, message: str, **context):
        super().__init__(message)
        self.context = context


class IncompleteConfigurationError(ConfigurationError):
    operator_message = "Por favor, complete todas as seleções antes de iniciar"


class ProductNotFoundError(ConfigurationError):
    operator_message = "Erro: Produto não encontrado. Entre em contato com o administrador."


class EntryStepNotFoundError(ConfigurationError):
    operator_message = "Erro: Script não encontrado para este produto. Entre em contato com o administrador."
