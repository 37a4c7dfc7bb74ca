from .db import REGISTRY_DB


class RegistryRouter:
    """
    Route the `simrs` app to the registry alias.

    - reads/writes of simrs models → registry
    - relations across the two stores are refused
    - nothing is ever migrated on the registry; simrs is never migrated anywhere
    """

    app_label = 'simrs'

    def db_for_read(self, model, **hints):
        if model._meta.app_label == self.app_label:
            return REGISTRY_DB
        return None

    def db_for_write(self, model, **hints):
        if model._meta.app_label == self.app_label:
            return REGISTRY_DB
        return None

    def allow_relation(self, obj1, obj2, **hints):
        in_registry = {
            obj1._meta.app_label == self.app_label,
            obj2._meta.app_label == self.app_label,
        }
        if len(in_registry) > 1:
            return False
        return None

    def allow_migrate(self, db, app_label, model_name=None, **hints):
        if app_label == self.app_label or db == REGISTRY_DB:
            return False
        return None
