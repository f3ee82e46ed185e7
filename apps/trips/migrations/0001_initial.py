# Generated manually for trips app

import uuid
from decimal import Decimal
from django.conf import settings
from django.core.validators import MinValueValidator
from django.db import migrations, models
import django.db.models.deletion


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='Trip',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('name', models.CharField(max_length=200)),
                ('description', models.TextField(blank=True)),
                ('base_currency', models.CharField(default='USD', max_length=3)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('deleted_at', models.DateTimeField(blank=True, null=True)),
                ('owner', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='owned_trips', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'db_table': 'trips',
                'ordering': ['-created_at'],
            },
        ),
        migrations.CreateModel(
            name='TripMember',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('role', models.CharField(choices=[('owner', 'Owner'), ('admin', 'Admin'), ('member', 'Member')], default='member', max_length=20)),
                ('rsvp', models.CharField(choices=[('pending', 'Pending'), ('going', 'Going'), ('maybe', 'Maybe'), ('not_going', 'Not going')], default='pending', max_length=20)),
                ('joined_at', models.DateTimeField(auto_now_add=True)),
                ('trip', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='memberships', to='trips.trip')),
                ('user', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='trip_memberships', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'db_table': 'trip_members',
                'ordering': ['joined_at'],
            },
        ),
        migrations.CreateModel(
            name='Expense',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('description', models.CharField(blank=True, max_length=200)),
                ('amount', models.DecimalField(decimal_places=2, max_digits=12, validators=[MinValueValidator(Decimal('0.00'))])),
                ('currency', models.CharField(max_length=3)),
                ('fx_rate', models.DecimalField(decimal_places=6, default=Decimal('1'), max_digits=14, validators=[MinValueValidator(Decimal('0.000001'))])),
                ('normalized_amount', models.DecimalField(decimal_places=2, editable=False, max_digits=12)),
                ('date', models.DateField()),
                ('status', models.CharField(choices=[('open', 'Open'), ('closed', 'Closed')], default='open', max_length=10)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('deleted_at', models.DateTimeField(blank=True, null=True)),
                ('paid_by', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='expenses_paid', to=settings.AUTH_USER_MODEL)),
                ('trip', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='expenses', to='trips.trip')),
            ],
            options={
                'db_table': 'expenses',
                'ordering': ['date', 'created_at'],
            },
        ),
        migrations.CreateModel(
            name='ShareAssignment',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('share_amount', models.DecimalField(decimal_places=2, max_digits=12, validators=[MinValueValidator(Decimal('0.00'))])),
                ('normalized_share_amount', models.DecimalField(decimal_places=2, editable=False, max_digits=12)),
                ('split_type', models.CharField(choices=[('equal', 'Equal'), ('custom', 'Custom'), ('percentage', 'Percentage')], default='equal', max_length=20)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('expense', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='assignments', to='trips.expense')),
                ('user', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='share_assignments', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'db_table': 'share_assignments',
                'ordering': ['created_at'],
            },
        ),
        # Indexes
        migrations.AddIndex(
            model_name='trip',
            index=models.Index(fields=['owner', 'created_at'], name='trips_owner_created_idx'),
        ),
        migrations.AddIndex(
            model_name='tripmember',
            index=models.Index(fields=['trip', 'role'], name='trip_members_trip_role_idx'),
        ),
        migrations.AddIndex(
            model_name='expense',
            index=models.Index(fields=['trip', 'date'], name='expenses_trip_date_idx'),
        ),
        migrations.AddIndex(
            model_name='expense',
            index=models.Index(fields=['paid_by', 'date'], name='expenses_paid_by_date_idx'),
        ),
        migrations.AddIndex(
            model_name='shareassignment',
            index=models.Index(fields=['user'], name='share_assign_user_idx'),
        ),
        # Unique constraints
        migrations.AlterUniqueTogether(
            name='tripmember',
            unique_together={('trip', 'user')},
        ),
        migrations.AlterUniqueTogether(
            name='shareassignment',
            unique_together={('expense', 'user')},
        ),
    ]
