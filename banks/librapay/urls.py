from django.urls import path

from banks.librapay import views

app_name = 'librapay'

urlpatterns = [
    path('pay/', views.pay, name='pay'),
    path('gateway/', views.gateway_form, name='gateway'),
    path('process/', views.process, name='process'),
    path('ipn/', views.ipn, name='ipn'),
]
