"""Provider-agnostic composition infrastructure.

This package provides:
- Publication / Subscription value types and shared enums
- Message type identity and name defaulting
- Base entity builders
- ProviderConfigurator (deferred actions against a shared connection)
- PipelineComposer (aggregates registrations into a PipelineRegistration)

Import classes directly from submodules:
    from pipeline.common.composer import PipelineComposer
    from pipeline.common.builders import SubscriptionBuilder
"""

# Transport SDKs are imported lazily by the provider adapters, so nothing
# heavy is pulled in at package import time.

__all__: list[str] = []
