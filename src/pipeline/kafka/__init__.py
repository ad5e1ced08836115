"""Kafka provider (aiokafka)."""

from pipeline.kafka.builders import (
    KafkaConnectionBuilder,
    KafkaProducerFactoryBuilder,
    KafkaPublicationBuilder,
    KafkaSubscriptionBuilder,
    KafkaSubscriptionConfigurator,
)
from pipeline.kafka.configurator import KafkaConfigurator
from pipeline.kafka.factories import KafkaConsumerFactory, KafkaProducerFactory
from pipeline.kafka.types import KafkaConnection, KafkaPublication, KafkaSubscription

__all__ = [
    "KafkaConfigurator",
    "KafkaConnection",
    "KafkaConnectionBuilder",
    "KafkaPublication",
    "KafkaPublicationBuilder",
    "KafkaSubscription",
    "KafkaSubscriptionBuilder",
    "KafkaSubscriptionConfigurator",
    "KafkaProducerFactoryBuilder",
    "KafkaProducerFactory",
    "KafkaConsumerFactory",
]
