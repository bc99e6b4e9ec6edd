"""
Tortoise ORM models for the user registry
"""
from tortoise.models import Model
from tortoise import fields


class User(Model):
    id = fields.IntField(pk=True)
    username = fields.CharField(max_length=255, unique=True)
    first_name = fields.CharField(max_length=255)
    middle_name = fields.CharField(max_length=255, null=True)
    last_name = fields.CharField(max_length=255)
    email = fields.CharField(max_length=255)
    gender = fields.CharField(max_length=1)
    age = fields.SmallIntField()
    beg_date = fields.DatetimeField(auto_now_add=True)
    updated_at = fields.DatetimeField(null=True)
    end_date = fields.DatetimeField(null=True)

    class Meta:
        table = "users"


class SchemaMigration(Model):
    name = fields.CharField(max_length=255, pk=True)
    version = fields.IntField()
    applied_at = fields.DatetimeField(auto_now_add=True)

    class Meta:
        table = "schema_migrations"
