"""Kafka provider configurator.

Kafka offers publications and subscriptions only; there is no Kafka
backed outbox, inbox or lock.

Example:
    composer = PipelineComposer()
    composer.using(KafkaConfigurator, lambda kafka: (
        kafka
        .use_publications(lambda p: p.add_publication(lambda b: b.set_topic("orders"), OrderEvent))
        .use_subscriptions(lambda s: s.add_subscription(lambda b: b.set_consumer_group_id("billing"), OrderEvent))
        .set_connection(lambda c: c.set_bootstrap_servers("localhost:9092"))
    ))
    registration = composer.build()
"""

from pipeline.common.configurator import ProviderConfigurator
from pipeline.kafka.builders import (
    KafkaConnectionBuilder,
    KafkaProducerFactoryBuilder,
    KafkaSubscriptionConfigurator,
)
from pipeline.kafka.factories import KafkaConsumerFactory
from pipeline.kafka.types import KafkaConnection


class KafkaConfigurator(ProviderConfigurator):
    provider = "kafka"
    connection_type = KafkaConnection
    connection_builder_class = KafkaConnectionBuilder
    producer_factory_builder_class = KafkaProducerFactoryBuilder
    subscription_configurator_class = KafkaSubscriptionConfigurator
    consumer_factory_class = KafkaConsumerFactory


__all__ = ["KafkaConfigurator"]
