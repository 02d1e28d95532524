from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="Product",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("title", models.CharField(max_length=200)),
                ("slug", models.SlugField(max_length=220, unique=True)),
                ("description", models.TextField(blank=True)),
                (
                    "status",
                    models.CharField(
                        choices=[("draft", "Draft"), ("published", "Published")],
                        db_index=True,
                        default="published",
                        max_length=16,
                    ),
                ),
                ("price", models.DecimalField(decimal_places=2, max_digits=12)),
                ("quantity", models.IntegerField(default=0)),
                ("sold", models.IntegerField(default=0)),
                ("colors", models.JSONField(blank=True, default=list)),
                ("image_cover", models.CharField(blank=True, max_length=255)),
                ("images", models.JSONField(blank=True, default=list)),
            ],
            options={
                "ordering": ["title"],
                "indexes": [
                    models.Index(fields=["status", "title"], name="product_status_title_idx"),
                    models.Index(fields=["-sold"], name="product_sold_desc_idx"),
                ],
                "constraints": [
                    models.CheckConstraint(condition=models.Q(price__gte=0), name="product_price_non_negative"),
                    models.CheckConstraint(condition=models.Q(quantity__gte=0), name="product_quantity_non_negative"),
                    models.CheckConstraint(condition=models.Q(sold__gte=0), name="product_sold_non_negative"),
                ],
            },
        ),
    ]
