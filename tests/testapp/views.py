"""
Views exercising auto upload through CurrentRequestMiddleware.
"""
from django.http import JsonResponse
from django.views.decorators.http import require_http_methods

from .models import User


def _create_user(request, image_fields=None, file_fields=None, disable_auto_upload=False):
    user = User(
        name=request.POST.get('name', ''),
        email=request.POST.get('email', ''),
        password=request.POST.get('password', ''),
    )
    if image_fields is not None:
        user.set_images_field(image_fields)
    if file_fields is not None:
        user.set_files_field(file_fields)
    if disable_auto_upload:
        user.disable_auto_upload()

    user.save()

    return JsonResponse({
        'id': user.pk,
        'avatar': user.avatar,
        'cover': user.cover,
        'resume': user.resume,
        'cover_letter': user.cover_letter,
    }, status=201)


@require_http_methods(['POST'])
def store(request):
    return _create_user(request, image_fields={
        'avatar': {'width': 200},
        'cover': {'width': 400, 'height': 400},
    })


@require_http_methods(['POST'])
def store_images_without_options(request):
    return _create_user(request, image_fields=['avatar', 'cover'])


@require_http_methods(['POST'])
def store_images_with_mixed_options(request):
    return _create_user(request, image_fields=[
        'avatar',
        {'cover': {'width': 400, 'height': 400, 'auto_upload': False}},
    ])


@require_http_methods(['POST'])
def store_files_with_options(request):
    return _create_user(request, file_fields={
        'resume': {'path': 'resumes'},
        'cover_letter': {'file_input': 'letter'},
    })


@require_http_methods(['POST'])
def store_auto_upload_disabled(request):
    return _create_user(request, image_fields=['avatar', 'cover'], disable_auto_upload=True)
