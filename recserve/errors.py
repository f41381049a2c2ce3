class EmptyTrainingSetError(ValueError):
    """Raised when fitting is attempted without any training triples."""

    def __init__(self, message: str = "No training data"):
        super().__init__(message)
