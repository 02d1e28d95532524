import django.db.models.deletion
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("catalog", "0001_initial"),
    ]

    operations = [
        migrations.CreateModel(
            name="StockMovement",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("quantity_delta", models.IntegerField(default=0)),
                ("sold_delta", models.IntegerField(default=0)),
                (
                    "reason",
                    models.CharField(
                        choices=[
                            ("order", "Order placed"),
                            ("payment", "Card payment confirmed"),
                            ("manual", "Manual adjustment"),
                        ],
                        max_length=16,
                    ),
                ),
                ("reference", models.CharField(blank=True, db_index=True, max_length=120)),
                (
                    "product",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE, related_name="movements", to="catalog.product"
                    ),
                ),
            ],
            options={
                "ordering": ["-created_at", "id"],
                "constraints": [
                    models.CheckConstraint(
                        condition=models.Q(("quantity_delta", 0), ("sold_delta", 0), _negated=True),
                        name="movement_non_zero",
                    ),
                ],
            },
        ),
    ]
