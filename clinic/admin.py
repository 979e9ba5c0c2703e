"""
Clinic — Django Admin Configuration

@file clinic/admin.py
"""

from django.contrib import admin

from .models import (
    Appointment,
    Consultation,
    ConsultationDetail,
    ConsultationMedicine,
    ConsultationReceipt,
    Patient,
    Service,
)


@admin.register(Patient)
class PatientAdmin(admin.ModelAdmin):
    list_display = ('patient_no', 'name', 'gender', 'mobile', 'franchise')
    list_filter = ('franchise', 'gender')
    search_fields = ('patient_no', 'name', 'mobile')
    readonly_fields = ('id', 'patient_no', 'created_at', 'updated_at')


@admin.register(Service)
class ServiceAdmin(admin.ModelAdmin):
    list_display = ('name', 'rate')
    search_fields = ('name',)


@admin.register(Appointment)
class AppointmentAdmin(admin.ModelAdmin):
    list_display = ('patient', 'franchise', 'appointment_at')
    list_filter = ('franchise',)
    list_select_related = ('patient', 'franchise')
    date_hierarchy = 'appointment_at'


class ConsultationDetailInline(admin.TabularInline):
    model = ConsultationDetail
    extra = 0
    readonly_fields = ('service', 'description', 'qty', 'rate', 'amount')
    can_delete = False


class ConsultationMedicineInline(admin.TabularInline):
    model = ConsultationMedicine
    extra = 0
    readonly_fields = ('medicine', 'qty', 'mrp', 'amount', 'doses')
    can_delete = False


class ConsultationReceiptInline(admin.TabularInline):
    model = ConsultationReceipt
    extra = 0
    fields = ('receipt_number', 'date', 'payment_mode', 'amount')
    readonly_fields = fields
    can_delete = False


@admin.register(Consultation)
class ConsultationAdmin(admin.ModelAdmin):
    """Dispensing goes through the API; the admin only views."""

    list_display = ('id', 'appointment', 'total_amount', 'total_received_amount', 'created_at')
    list_select_related = ('appointment__patient',)
    readonly_fields = (
        'id', 'appointment', 'complaint', 'diagnosis', 'remarks', 'next_follow_up_date',
        'total_amount', 'total_received_amount', 'created_at', 'created_by',
    )
    inlines = [ConsultationDetailInline, ConsultationMedicineInline, ConsultationReceiptInline]

    def has_add_permission(self, request):
        return False

    def has_delete_permission(self, request, obj=None):
        return False
