from decimal import Decimal

import django.core.validators
import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='Gig',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('title', models.CharField(max_length=200)),
                ('description', models.TextField(max_length=5000)),
                ('category', models.CharField(db_index=True, max_length=100)),
                ('image', models.CharField(blank=True, max_length=500)),
                ('price', models.PositiveIntegerField(help_text='Price charged per order', validators=[django.core.validators.MinValueValidator(1)])),
                ('duration_days', models.PositiveIntegerField(default=7, help_text='Days allowed for delivery', validators=[django.core.validators.MinValueValidator(1)])),
                ('rating', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=3)),
                ('total_reviews', models.PositiveIntegerField(default=0)),
                ('created_at', models.DateTimeField(auto_now_add=True, db_index=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('freelancer', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='gigs', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'verbose_name': 'Gig',
                'verbose_name_plural': 'Gigs',
                'ordering': ['-created_at'],
                'indexes': [
                    models.Index(fields=['freelancer', '-created_at'], name='gig_freelancer_created_idx'),
                    models.Index(fields=['category', '-created_at'], name='gig_category_created_idx'),
                ],
                'constraints': [
                    models.CheckConstraint(check=models.Q(('price__gt', 0)), name='gig_price_positive'),
                    models.CheckConstraint(check=models.Q(('duration_days__gt', 0)), name='gig_duration_positive'),
                ],
            },
        ),
    ]
