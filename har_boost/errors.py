class HARPipelineError(ValueError):
    """Base class for fatal input errors raised by the pipeline."""


class InputSchemaError(HARPipelineError):
    """Train/test columns differ, rows misaligned, or feature names missing."""


# Name used for train/test mismatches in the loader
DataMismatch = InputSchemaError


class LabelRangeError(HARPipelineError):
    """Label values outside the expected class domain."""


class ShapePredictionMismatch(HARPipelineError):
    """Probability buffer incompatible with the class count or test rows."""
