"""
Template tags for imageup.

    {% load imageup %}
    <a href="{% upload_url user 'resume' %}">Resume</a>
    {% image_tag user 'avatar' 'class="rounded"' %}
"""
from django import template

register = template.Library()


@register.simple_tag
def upload_url(record, field=None):
    """URL of the file stored in ``field`` of ``record``."""
    return record.image_url(field)


@register.simple_tag
def image_tag(record, field=None, attributes=''):
    """<img> tag for an image field; empty when it cannot be rendered."""
    return record.image_tag(field, attributes)
