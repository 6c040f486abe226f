"""Vitals storefront cart and checkout service"""
