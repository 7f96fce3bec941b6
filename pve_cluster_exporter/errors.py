class ExporterError(Exception):
    pass


class ConfigError(ExporterError):
    pass


class ProviderError(ExporterError):
    """Remote API call failed (transport, auth, status or decoding)."""


class FetchFailure(ExporterError):
    """A measurement could not be collected during this scrape."""

    def __init__(self, metric_name, cause):
        super().__init__(f"{metric_name}: {cause}")
        self.metric_name = metric_name
        self.cause = cause


class MissingClusterRecord(FetchFailure):
    def __init__(self, metric_name):
        super().__init__(metric_name, "cluster status has no cluster entry")


class FormatFailure(ExporterError):
    pass
