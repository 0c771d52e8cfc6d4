from django.db import migrations, models

from stock.utils import normalize_text


def fill_search_columns(apps, schema_editor):
    Product = apps.get_model("stock", "Product")
    for product in Product.objects.all():
        product.search_name = normalize_text(product.name)
        product.search_sku = normalize_text(product.sku)
        product.save(update_fields=["search_name", "search_sku"])


class Migration(migrations.Migration):

    dependencies = [
        ("stock", "0002_stockmovement_order"),
    ]

    operations = [
        migrations.AddField(
            model_name="product",
            name="search_name",
            field=models.CharField(blank=True, default="", editable=False, max_length=200),
        ),
        migrations.AddField(
            model_name="product",
            name="search_sku",
            field=models.CharField(blank=True, default="", editable=False, max_length=50),
        ),
        migrations.RunPython(fill_search_columns, migrations.RunPython.noop),
    ]
