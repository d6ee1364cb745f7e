class ConfigError(ValueError):
    """run.yaml or scenarios.yaml holds an invalid value."""


class ForbiddenOnlyError(Exception):
    """Raised when only-marked tests are collected while forbid_only is on."""

    def __init__(self, node_ids):
        self.node_ids = list(node_ids)
        super().__init__(
            "only-marked tests are forbidden in this run: " + ", ".join(self.node_ids)
        )
