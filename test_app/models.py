from django.db import models

from django_restify.schema import FieldDeclaration, ModelSchema

ADDRESS_SCHEMA = ModelSchema(
    "Address",
    [
        FieldDeclaration("street"),
        FieldDeclaration("zip", access="private"),
    ],
)

CONTACT_SCHEMA = ModelSchema(
    "Contact",
    [
        FieldDeclaration("label"),
        FieldDeclaration("phone", access="protected", write_access="private"),
    ],
)


class Person(models.Model):
    name = models.CharField(max_length=100)
    ssn = models.CharField(max_length=11, blank=True, default="")
    salary = models.DecimalField(max_digits=10, decimal_places=2, default=0)
    email = models.EmailField(blank=True, default="")
    nickname = models.CharField(max_length=50, blank=True, default="")
    address = models.JSONField(default=dict, blank=True)
    contacts = models.JSONField(default=list, blank=True)

    class Meta:
        app_label = "test_app"
        verbose_name_plural = "people"

    class RestifyMeta:
        access = {"ssn": "private", "salary": "protected", "nickname": "secret"}
        write_access = {"salary": "private", "email": "protected"}
        embedded = {"address": ADDRESS_SCHEMA, "contacts": [CONTACT_SCHEMA]}


class Tag(models.Model):
    label = models.CharField(max_length=50)
    internal_code = models.CharField(max_length=20, blank=True, default="")

    class Meta:
        app_label = "test_app"

    class RestifyMeta:
        access = {"internal_code": "protected"}


class Order(models.Model):
    reference = models.CharField(max_length=50)
    total = models.DecimalField(max_digits=10, decimal_places=2, default=0)
    margin = models.DecimalField(max_digits=10, decimal_places=2, default=0)
    owner = models.ForeignKey(Person, on_delete=models.CASCADE, related_name="orders")
    approver = models.ForeignKey(
        Person,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="approved_orders",
    )
    tags = models.ManyToManyField(Tag, blank=True, related_name="orders")

    class Meta:
        app_label = "test_app"

    class RestifyMeta:
        access = {"margin": "private"}
        write_access = {"total": "protected"}


class Company(models.Model):
    name = models.CharField(max_length=100)
    revenue = models.DecimalField(max_digits=12, decimal_places=2, default=0)
    ceo = models.ForeignKey(
        "Employee",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="led_companies",
    )

    class Meta:
        app_label = "test_app"
        verbose_name_plural = "companies"

    class RestifyMeta:
        access = {"revenue": "protected"}


class Employee(models.Model):
    name = models.CharField(max_length=100)
    badge = models.CharField(max_length=20, blank=True, default="")
    company = models.ForeignKey(
        Company,
        on_delete=models.CASCADE,
        null=True,
        blank=True,
        related_name="employees",
    )
    mentor = models.ForeignKey(
        "self", on_delete=models.SET_NULL, null=True, blank=True, related_name="mentees"
    )

    class Meta:
        app_label = "test_app"

    class RestifyMeta:
        access = {"badge": "private"}
