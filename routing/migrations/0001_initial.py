import django.db.models.deletion
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ('accounts', '0001_initial'),
        ('filing', '0001_initial'),
    ]

    operations = [
        migrations.CreateModel(
            name='SLAMatrixRule',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('from_role_code', models.CharField(max_length=50)),
                ('to_role_code', models.CharField(max_length=50)),
                ('level_scope', models.CharField(choices=[('district', 'District'), ('town', 'Town'), ('division', 'Division'), ('department', 'Department'), ('team', 'Team'), ('global', 'Global')], default='district', max_length=20)),
                ('sla_hours', models.PositiveIntegerField(default=24)),
                ('is_active', models.BooleanField(db_index=True, default=True)),
                ('description', models.CharField(blank=True, max_length=255)),
            ],
            options={
                'verbose_name': 'SLA Matrix Rule',
                'verbose_name_plural': 'SLA Matrix Rules',
                'ordering': ['id'],
            },
        ),
        migrations.CreateModel(
            name='FileMovement',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('action_type', models.CharField(choices=[('MARK_TO', 'Marked To')], default='MARK_TO', max_length=20)),
                ('remarks', models.TextField(blank=True)),
                ('is_team_internal', models.BooleanField(default=False)),
                ('is_return_to_creator', models.BooleanField(default=False)),
                ('tat_started', models.BooleanField(default=False)),
                ('from_user_name', models.CharField(blank=True, max_length=255)),
                ('from_user_designation', models.CharField(blank=True, max_length=150)),
                ('from_user_town', models.CharField(blank=True, max_length=100)),
                ('from_user_division', models.CharField(blank=True, max_length=100)),
                ('to_user_name', models.CharField(blank=True, max_length=255)),
                ('to_user_designation', models.CharField(blank=True, max_length=150)),
                ('to_user_town', models.CharField(blank=True, max_length=100)),
                ('to_user_division', models.CharField(blank=True, max_length=100)),
                ('created_at', models.DateTimeField(auto_now_add=True, db_index=True)),
                ('file', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='movements', to='filing.efile')),
                ('from_user', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='+', to='accounts.efilinguser')),
                ('to_user', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='+', to='accounts.efilinguser')),
                ('from_department', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='+', to='accounts.department')),
                ('to_department', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='+', to='accounts.department')),
            ],
            options={
                'verbose_name': 'File Movement',
                'verbose_name_plural': 'File Movements',
                'ordering': ['-created_at', '-id'],
            },
        ),
        migrations.CreateModel(
            name='SLAPauseRecord',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('paused_at', models.DateTimeField()),
                ('resumed_at', models.DateTimeField(blank=True, null=True)),
                ('pause_reason', models.CharField(default='MANUAL_PAUSE', max_length=50)),
                ('duration_hours', models.FloatField(blank=True, null=True)),
                ('file', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='sla_pauses', to='filing.efile')),
                ('paused_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='+', to='accounts.efilinguser')),
            ],
            options={
                'ordering': ['-paused_at'],
            },
        ),
        migrations.CreateModel(
            name='TatLog',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('event_type', models.CharField(choices=[('ONE_HOUR_WARNING', 'Deadline Warning')], max_length=30)),
                ('sla_deadline', models.DateTimeField(blank=True, null=True)),
                ('time_remaining_hours', models.FloatField(blank=True, null=True)),
                ('message', models.TextField(blank=True)),
                ('notification_sent', models.BooleanField(default=False)),
                ('created_at', models.DateTimeField(auto_now_add=True, db_index=True)),
                ('file', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='tat_logs', to='filing.efile')),
                ('person', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='tat_logs', to='accounts.efilinguser')),
            ],
        ),
    ]
