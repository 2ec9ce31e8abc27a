from shotgate.api.abstract_classification_client import AbstractClassificationClient
from shotgate.api.classification_client import ClassificationClient

__all__ = ["AbstractClassificationClient", "ClassificationClient"]
