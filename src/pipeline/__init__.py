"""
Pipeline: fluent, deferred composition of message transports.

Subpackages:
    common    - Entity values, builders, the provider configurator base and
                the PipelineComposer
    kafka     - Kafka provider (aiokafka)
    eventhub  - Azure Event Hubs provider (azure-eventhub, azure-storage-blob)
    postgres  - PostgreSQL queue, outbox, inbox and lock provider (asyncpg)

Flow:
    configurators record deferred actions → PipelineComposer.build()
    → each configurator checks its connection and replays its actions
    → frozen PipelineRegistration handed to the runtime
"""

from pipeline.common.composer import PipelineComposer, PipelineRegistration

__version__ = "0.1.0"

__all__ = ["PipelineComposer", "PipelineRegistration"]
