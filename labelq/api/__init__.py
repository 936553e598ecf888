"""LabelQ HTTP API"""
