# Generated migration for Professional, CustomerPreference, Lead and Assignment models

from django.db import migrations, models
import django.db.models.deletion
import django.utils.timezone


class Migration(migrations.Migration):

    initial = True

    dependencies = [
    ]

    operations = [
        migrations.CreateModel(
            name='Professional',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('email', models.EmailField(max_length=254, unique=True)),
                ('name', models.CharField(max_length=200)),
                ('business_name', models.CharField(blank=True, default='', max_length=200)),
                ('role', models.CharField(choices=[('vendor', 'Vendor'), ('trade', 'Trade')], db_index=True, max_length=10)),
                ('materials', models.JSONField(blank=True, default=list)),
                ('zip_codes_served', models.JSONField(blank=True, default=list)),
                ('zip_code', models.CharField(blank=True, default='', max_length=10)),
                ('service_radius', models.PositiveIntegerField(default=50)),
                ('latitude', models.FloatField(blank=True, null=True)),
                ('longitude', models.FloatField(blank=True, null=True)),
                ('weekly_lead_limit', models.PositiveIntegerField(default=10)),
                ('leads_received_this_week', models.PositiveIntegerField(default=0)),
                ('active', models.BooleanField(db_index=True, default=True)),
                ('tier', models.CharField(choices=[('free', 'Free'), ('pro', 'Pro'), ('premium', 'Premium')], default='free', max_length=10)),
                ('years_experience', models.PositiveIntegerField(blank=True, null=True)),
                ('rating_average', models.FloatField(default=0)),
                ('total_reviews', models.PositiveIntegerField(default=0)),
                ('report_count', models.PositiveIntegerField(default=0)),
                ('minimum_project', models.DecimalField(blank=True, decimal_places=2, max_digits=12, null=True)),
                ('last_active', models.DateTimeField(blank=True, null=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
            ],
            options={
                'ordering': ['id'],
            },
        ),
        migrations.CreateModel(
            name='CustomerPreference',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('customer_id', models.CharField(max_length=200, unique=True)),
                ('favorite_professionals', models.JSONField(blank=True, default=list)),
                ('blocked_professionals', models.JSONField(blank=True, default=list)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
            ],
        ),
        migrations.CreateModel(
            name='Lead',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('customer_id', models.CharField(db_index=True, max_length=200)),
                ('customer_name', models.CharField(max_length=200)),
                ('customer_email', models.EmailField(max_length=254)),
                ('customer_phone', models.CharField(blank=True, default='', max_length=50)),
                ('zip_code', models.CharField(db_index=True, max_length=10)),
                ('material_categories', models.JSONField(default=list)),
                ('project_type', models.CharField(blank=True, default='', max_length=100)),
                ('budget', models.DecimalField(blank=True, decimal_places=2, max_digits=12, null=True)),
                ('timeline', models.CharField(blank=True, default='', max_length=100)),
                ('description', models.TextField(blank=True, default='')),
                ('urgency', models.CharField(choices=[('low', 'Low'), ('medium', 'Medium'), ('high', 'High')], default='medium', max_length=10)),
                ('professional_type', models.CharField(choices=[('vendor', 'Vendor'), ('trade', 'Trade'), ('both', 'Both')], default='vendor', max_length=10)),
                ('status', models.CharField(choices=[('new', 'New'), ('active', 'Active'), ('completed', 'Completed'), ('archived', 'Archived')], db_index=True, default='new', max_length=10)),
                ('intent_score', models.PositiveSmallIntegerField(blank=True, null=True)),
                ('matched_professionals', models.JSONField(blank=True, default=list)),
                ('non_responsive_professionals', models.JSONField(blank=True, default=list)),
                ('matched_at', models.DateTimeField(blank=True, null=True)),
                ('raw_payload', models.JSONField(blank=True, null=True)),
                ('created_at', models.DateTimeField(auto_now_add=True, db_index=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
            ],
            options={
                'ordering': ['-created_at'],
            },
        ),
        migrations.CreateModel(
            name='Assignment',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('professional_ref', models.CharField(max_length=100)),
                ('professional_name', models.CharField(max_length=200)),
                ('customer_id', models.CharField(max_length=200)),
                ('customer_name', models.CharField(max_length=200)),
                ('material', models.CharField(blank=True, default='', max_length=100)),
                ('zip_code', models.CharField(max_length=10)),
                ('assigned_at', models.DateTimeField(db_index=True, default=django.utils.timezone.now)),
                ('expires_at', models.DateTimeField()),
                ('responded_at', models.DateTimeField(blank=True, null=True)),
                ('status', models.CharField(choices=[('assigned', 'Assigned'), ('viewed', 'Viewed'), ('contacted', 'Contacted'), ('declined', 'Declined'), ('expired', 'Expired')], db_index=True, default='assigned', max_length=10)),
                ('notified', models.BooleanField(default=False)),
                ('score', models.FloatField()),
                ('match_reasons', models.JSONField(default=list)),
                ('distance_miles', models.FloatField(blank=True, null=True)),
                ('fallback_professional', models.BooleanField(default=False)),
                ('lead', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='assignments', to='matching.lead')),
                ('professional', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='assignments', to='matching.professional')),
            ],
            options={
                'ordering': ['-assigned_at'],
            },
        ),
        migrations.AddIndex(
            model_name='professional',
            index=models.Index(fields=['role', 'active'], name='matching_pr_role_0a1b2c_idx'),
        ),
        migrations.AddIndex(
            model_name='lead',
            index=models.Index(fields=['status', 'created_at'], name='matching_le_status_3d4e5f_idx'),
        ),
        migrations.AddIndex(
            model_name='assignment',
            index=models.Index(fields=['status', 'assigned_at'], name='matching_as_status_6a7b8c_idx'),
        ),
        migrations.AddConstraint(
            model_name='assignment',
            constraint=models.UniqueConstraint(fields=('lead', 'professional_ref'), name='unique_assignment_per_professional'),
        ),
    ]
