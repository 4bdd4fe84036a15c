import django.db.models.deletion
import django.utils.timezone
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='ApiToken',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('key', models.CharField(help_text='Bearer token value', max_length=40, unique=True)),
                ('user_agent', models.CharField(blank=True, default='', help_text='Client user agent string', max_length=255)),
                ('created_at', models.DateTimeField(auto_now_add=True, help_text='Token issue time')),
                ('last_used_at', models.DateTimeField(db_index=True, default=django.utils.timezone.now, help_text='Last authenticated request')),
                ('user', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='api_tokens', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'verbose_name': 'API token',
                'verbose_name_plural': 'API tokens',
                'ordering': ['-last_used_at'],
                'indexes': [models.Index(fields=['user', '-last_used_at'], name='accounts_user_activity_idx')],
            },
        ),
    ]
