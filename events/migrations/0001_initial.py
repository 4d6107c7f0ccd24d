import django.core.validators
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name='Event',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('title', models.CharField(max_length=255)),
                ('team_capacity', models.PositiveIntegerField(blank=True, help_text='Maximum team size including the leader. Empty = unbounded.', null=True, validators=[django.core.validators.MinValueValidator(1)])),
                ('created_at', models.DateTimeField(auto_now_add=True)),
            ],
            options={
                'indexes': [models.Index(fields=['created_at'], name='event_created_idx')],
                'constraints': [
                    models.CheckConstraint(check=models.Q(('team_capacity__isnull', True), ('team_capacity__gte', 1), _connector='OR'), name='event_team_capacity_positive'),
                ],
            },
        ),
    ]
