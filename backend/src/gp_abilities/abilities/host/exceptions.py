class CapabilityDenied(Exception):
    """Raised when a handler touches a host capability its provider did not declare."""

    def __init__(self, capability: str):
        self.capability = capability
        super().__init__(f"Host capability '{capability}' not declared in provider manifest")
