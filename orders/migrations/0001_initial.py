from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="Order",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("state", models.CharField(db_index=True, default="draft", max_length=32)),
                (
                    "workflow",
                    models.CharField(
                        choices=[
                            ("order_default", "Default"),
                            ("order_default_validation", "Default, with validation"),
                        ],
                        default="order_default",
                        max_length=64,
                    ),
                ),
                ("total_price", models.DecimalField(decimal_places=2, max_digits=12)),
                ("currency", models.CharField(default="TRY", max_length=3)),
                ("locked", models.BooleanField(default=False)),
                ("placed_at", models.DateTimeField(blank=True, null=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
            ],
        ),
    ]
